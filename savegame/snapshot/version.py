"""
Save format version triple.
"""

from __future__ import annotations

from typing import Annotated, Any, NamedTuple

from pydantic import BeforeValidator, PlainSerializer


class SaveVersion(NamedTuple):
    """
    Semantic version of the save format.

    Ordered like a tuple, so (1, 2, 0) < (1, 10, 0). Persisted as "1.2.0".
    """
    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, value: Any) -> SaveVersion:
        """Parse "1.2.3" / "1.2" / (1, 2, 3) / another SaveVersion."""
        if isinstance(value, SaveVersion):
            return value
        if isinstance(value, str):
            parts = value.strip().split(".")
            if not 1 <= len(parts) <= 3 or not all(p.isdigit() for p in parts):
                raise ValueError(f"Invalid save version: {value!r}")
            return cls(*(int(p) for p in parts))
        if isinstance(value, (list, tuple)) and 1 <= len(value) <= 3:
            if not all(isinstance(p, int) and not isinstance(p, bool) for p in value):
                raise ValueError(f"Invalid save version: {value!r}")
            return cls(*value)
        raise ValueError(f"Invalid save version: {value!r}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


CURRENT_SAVE_VERSION = SaveVersion(1, 0, 0)
MINIMUM_SAVE_VERSION = SaveVersion(1, 0, 0)

# Field type for models: accepts any parseable form, dumps as text.
VersionField = Annotated[
    SaveVersion,
    BeforeValidator(SaveVersion.parse),
    PlainSerializer(str, return_type=str),
]
