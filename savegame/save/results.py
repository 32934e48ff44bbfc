"""
Outcome records returned by SaveManager.

Save, load, import and validate never raise for I/O, corruption or
validation problems; callers inspect these instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from savegame.snapshot.models import GameStateSnapshot
from savegame.snapshot.version import SaveVersion


@dataclass
class ValidationResult:
    """
    Findings for one payload or snapshot.

    Errors block loading. Warnings are reported but allow graceful
    degradation (e.g. an older save missing a newer section).
    """
    is_valid: bool = False
    exists: bool = False
    checksum_valid: bool = False
    version_compatible: bool = False
    save_version: Optional[SaveVersion] = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def merge(self, other: ValidationResult) -> None:
        """Append another result's findings to this one."""
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)


@dataclass
class SaveResult:
    """Result of a save operation."""
    success: bool
    slot_id: str
    duration: float = 0.0
    file_size_bytes: int = 0
    error: Optional[str] = None
    exception: Optional[Exception] = None


@dataclass
class LoadResult:
    """Result of a load operation."""
    success: bool
    slot_id: str
    snapshot: Optional[GameStateSnapshot] = None
    duration: float = 0.0
    was_migrated: bool = False
    original_version: Optional[SaveVersion] = None
    error: Optional[str] = None
    exception: Optional[Exception] = None


@dataclass
class ImportResult:
    """Result of importing an external save file into a slot."""
    success: bool
    target_slot_id: str
    validation_result: ValidationResult = field(default_factory=ValidationResult)
    error: Optional[str] = None


@dataclass
class AutoSaveConfig:
    """Current auto-save settings."""
    enabled: bool = False
    interval_seconds: int = 300
    slot_id: str = "autosave"
    last_auto_save: Optional[datetime] = None
