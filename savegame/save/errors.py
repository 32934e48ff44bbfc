"""
Save system exceptions.

Lower layers (serializer, store, validator) raise these; SaveManager
catches them and reports them through result objects. Only argument
errors (InvalidSlotError and other ValueErrors) reach callers directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from savegame.save.results import ValidationResult
    from savegame.snapshot.version import SaveVersion


class SaveError(Exception):
    """Base exception for save/load errors."""


class InvalidSlotError(SaveError, ValueError):
    """Raised for a blank slot id or one with no valid file name characters."""


class OperationCancelledError(SaveError):
    """Raised when an I/O operation observes a cancellation request."""


class SaveSerializationError(SaveError):
    """Raised when a snapshot cannot be encoded or decoded."""


class SaveNotFoundError(SaveError):
    """Raised when a slot has no payload file."""

    def __init__(self, slot_id: str, message: Optional[str] = None):
        super().__init__(message or f"Save file not found for slot: {slot_id}")
        self.slot_id = slot_id


class SaveCorruptedError(SaveError):
    """Raised when a payload fails its checksum or cannot be parsed."""

    def __init__(
        self,
        slot_id: str,
        message: Optional[str] = None,
        checksum_expected: Optional[str] = None,
        checksum_actual: Optional[str] = None,
    ):
        if message is None:
            if checksum_expected is not None:
                message = (
                    f"Save file checksum mismatch for {slot_id}. "
                    f"Expected: {checksum_expected}, Actual: {checksum_actual}"
                )
            else:
                message = f"Save file is corrupted: {slot_id}"
        super().__init__(message)
        self.slot_id = slot_id
        self.checksum_expected = checksum_expected
        self.checksum_actual = checksum_actual


class SaveVersionIncompatibleError(SaveError):
    """Raised when a save's format version is outside the supported range."""

    def __init__(self, save_version: SaveVersion, current_version: SaveVersion):
        super().__init__(
            f"Save version {save_version} is incompatible with current version {current_version}"
        )
        self.save_version = save_version
        self.current_version = current_version


class SaveValidationError(SaveError):
    """Raised when structural or semantic validation fails; carries every finding."""

    def __init__(self, validation_result: ValidationResult, message: Optional[str] = None):
        if message is None:
            errors = validation_result.errors
            message = f"Save validation failed with {len(errors)} errors"
            if errors:
                message += ": " + "; ".join(errors)
        super().__init__(message)
        self.validation_result = validation_result
