"""
Model base class for persisted records.

Every record that ends up on disk (snapshots, creature records, sidecar
metadata) derives from SaveModel. Models carry data only: type checking is
done by pydantic, game rules are checked by the validator so that a save
coming from an untrusted file can still be loaded and reported on.

Usage:
    class Position(SaveModel):
        x: float = 0.0
        y: float = 0.0

    pos = Position.model_validate({"x": 1, "y": 2})
    data = pos.model_dump(mode="json")
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class SaveModel(BaseModel):
    """
    Base class for all persisted records.

    Uses Pydantic for:
    - Type validation when decoding untrusted files
    - JSON-compatible dumps
    - Default values for optional sections

    Unknown fields are rejected so a damaged key name shows up as a
    decode error instead of being silently dropped.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',
        populate_by_name=True,
    )

    def clone(self) -> SaveModel:
        """Create a deep copy of this record."""
        return self.model_copy(deep=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to plain JSON types (str, int, float, bool, list, dict, None)."""
        return self.model_dump(mode="json")
