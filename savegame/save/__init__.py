"""
Save module - game state persistence.

Provides:
- Save/load game state to named slots
- Checksum, version and structure validation
- Auto-save functionality
- Save metadata sidecars (player, location, playtime)
- Export/import of save files
"""

from savegame.save.errors import (
    SaveError,
    InvalidSlotError,
    OperationCancelledError,
    SaveSerializationError,
    SaveNotFoundError,
    SaveCorruptedError,
    SaveVersionIncompatibleError,
    SaveValidationError,
)
from savegame.save.results import (
    ValidationResult,
    SaveResult,
    LoadResult,
    ImportResult,
    AutoSaveConfig,
)
from savegame.save.serializer import JsonSaveSerializer
from savegame.save.store import FileSystemSlotStore, sanitize_slot_id
from savegame.save.validator import SaveValidator
from savegame.save.locks import SlotLockRegistry
from savegame.save.autosave import AutoSaveScheduler
from savegame.save.provider import SnapshotProvider, GameStateManager
from savegame.save.manager import SaveManager, SaveEvent

__all__ = [
    "SaveError",
    "InvalidSlotError",
    "OperationCancelledError",
    "SaveSerializationError",
    "SaveNotFoundError",
    "SaveCorruptedError",
    "SaveVersionIncompatibleError",
    "SaveValidationError",
    "ValidationResult",
    "SaveResult",
    "LoadResult",
    "ImportResult",
    "AutoSaveConfig",
    "JsonSaveSerializer",
    "FileSystemSlotStore",
    "sanitize_slot_id",
    "SaveValidator",
    "SlotLockRegistry",
    "AutoSaveScheduler",
    "SnapshotProvider",
    "GameStateManager",
    "SaveManager",
    "SaveEvent",
]
