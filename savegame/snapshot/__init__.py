"""
Snapshot module - the persisted data model.

Provides:
- GameStateSnapshot and its section records
- SaveVersion (format version triple)
- Tagged mod data values
- SaveMetadata sidecar record
"""

from savegame.snapshot.version import (
    SaveVersion,
    CURRENT_SAVE_VERSION,
    MINIMUM_SAVE_VERSION,
)
from savegame.snapshot.mod_data import (
    TextValue,
    NumberValue,
    FlagValue,
    MapValue,
    ModValue,
    wrap,
    unwrap,
)
from savegame.snapshot.models import (
    MAX_PARTY_SIZE,
    MAX_MOVES,
    MIN_LEVEL,
    MAX_LEVEL,
    BOX_CAPACITY,
    GameStateKind,
    Position,
    PlayerData,
    BaseStats,
    StatBlock,
    MoveData,
    CreatureData,
    BoxData,
    InventoryData,
    MapData,
    WorldData,
    BattleData,
    ProgressData,
    PokedexData,
    GameStateSnapshot,
)
from savegame.snapshot.metadata import SaveMetadata

__all__ = [
    "SaveVersion",
    "CURRENT_SAVE_VERSION",
    "MINIMUM_SAVE_VERSION",
    "TextValue",
    "NumberValue",
    "FlagValue",
    "MapValue",
    "ModValue",
    "wrap",
    "unwrap",
    "MAX_PARTY_SIZE",
    "MAX_MOVES",
    "MIN_LEVEL",
    "MAX_LEVEL",
    "BOX_CAPACITY",
    "GameStateKind",
    "Position",
    "PlayerData",
    "BaseStats",
    "StatBlock",
    "MoveData",
    "CreatureData",
    "BoxData",
    "InventoryData",
    "MapData",
    "WorldData",
    "BattleData",
    "ProgressData",
    "PokedexData",
    "GameStateSnapshot",
    "SaveMetadata",
]
