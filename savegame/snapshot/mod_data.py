"""
Extension data carried inside a snapshot.

Mods store opaque values under namespaced keys ("mymod.reputation"). The
core never interprets them; it only needs to round-trip them. Each value is
a tagged variant so the payload stays plain JSON:

    {"kind": "number", "value": 12}
    {"kind": "map", "entries": {"unlocked": {"kind": "flag", "value": true}}}

Usage:
    snapshot.mod_data["mymod.reputation"] = wrap(12)
    unwrap(snapshot.mod_data["mymod.reputation"])  # -> 12
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Field

from savecore.core.model import SaveModel


class TextValue(SaveModel):
    kind: Literal["text"] = "text"
    value: str


class NumberValue(SaveModel):
    kind: Literal["number"] = "number"
    value: int | float


class FlagValue(SaveModel):
    kind: Literal["flag"] = "flag"
    value: bool


class MapValue(SaveModel):
    kind: Literal["map"] = "map"
    entries: dict[str, ModValue] = Field(default_factory=dict)


ModValue = Annotated[
    Union[TextValue, NumberValue, FlagValue, MapValue],
    Field(discriminator="kind"),
]

MapValue.model_rebuild()


def wrap(value: Any) -> TextValue | NumberValue | FlagValue | MapValue:
    """Convert a plain Python value into its tagged form."""
    # bool before number: bool is an int subclass
    if isinstance(value, (TextValue, NumberValue, FlagValue, MapValue)):
        return value
    if isinstance(value, bool):
        return FlagValue(value=value)
    if isinstance(value, (int, float)):
        return NumberValue(value=value)
    if isinstance(value, str):
        return TextValue(value=value)
    if isinstance(value, dict):
        return MapValue(entries={str(k): wrap(v) for k, v in value.items()})
    raise TypeError(f"Unsupported mod data value type: {type(value).__name__}")


def unwrap(value: TextValue | NumberValue | FlagValue | MapValue) -> Any:
    """Convert a tagged value back into plain Python data."""
    if isinstance(value, MapValue):
        return {k: unwrap(v) for k, v in value.entries.items()}
    return value.value
