"""
Save/Load system - game state persistence.

Provides:
- Named save slots backed by the file system
- Two-pass SHA-256 checksums for save integrity
- Version and structure validation before anything is restored
- Auto-save on a background timer
- Export/import of save files
- Event publishing for save/load operations

Public operations return result objects instead of raising; only argument
errors (blank slot ids or paths, too-short auto-save interval) raise.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from datetime import datetime, timezone
from enum import Enum, auto
from pathlib import Path
from typing import Any, Optional

from savecore.core.cancellation import CancellationToken
from savecore.core.config import MIN_AUTO_SAVE_INTERVAL, SaveConfig
from savecore.core.events import EventBus
from savegame.save.autosave import AutoSaveScheduler
from savegame.save.errors import (
    OperationCancelledError,
    SaveCorruptedError,
    SaveError,
    SaveNotFoundError,
    SaveValidationError,
    SaveVersionIncompatibleError,
)
from savegame.save.locks import SlotLockRegistry
from savegame.save.provider import SnapshotProvider
from savegame.save.results import (
    AutoSaveConfig,
    ImportResult,
    LoadResult,
    SaveResult,
    ValidationResult,
)
from savegame.save.serializer import JsonSaveSerializer
from savegame.save.store import FileSystemSlotStore, sanitize_slot_id
from savegame.save.validator import SaveValidator
from savegame.snapshot.metadata import SaveMetadata

AUTO_SAVE_DESCRIPTION = "Auto-save"


class SaveEvent(Enum):
    """Save system events."""
    SAVE_STARTED = auto()
    SAVE_COMPLETED = auto()
    SAVE_FAILED = auto()
    LOAD_STARTED = auto()
    LOAD_COMPLETED = auto()
    LOAD_FAILED = auto()
    AUTO_SAVE_TRIGGERED = auto()
    SAVE_DELETED = auto()
    SAVE_EXPORTED = auto()
    SAVE_IMPORTED = auto()


class SaveManager:
    """
    Manages saving and loading game state.

    Features:
    - Any number of named slots
    - Auto-save with a configurable interval (minimum 30 seconds)
    - Checksum, version and structure validation
    - Event publishing for save/load operations
    - Safe to call from worker threads; operations on one slot are serialized

    Usage:
        save_mgr = SaveManager(GameStateManager(), config=SaveConfig(save_directory="saves"))
        save_mgr.save("slot1", description="Before gym")
        result = save_mgr.load("slot1")

        # Auto-save
        save_mgr.configure_auto_save(True, interval_seconds=300)
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        serializer: Optional[JsonSaveSerializer] = None,
        store: Optional[FileSystemSlotStore] = None,
        validator: Optional[SaveValidator] = None,
        config: Optional[SaveConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        if provider is None:
            raise ValueError("A snapshot provider is required")

        self.logger = logging.getLogger(__name__)
        self.config = config or SaveConfig()
        self.provider = provider
        self.serializer = serializer or JsonSaveSerializer(pretty_print=self.config.pretty_print)
        self.store = store or FileSystemSlotStore(self.config.resolve_save_directory())
        self.validator = validator or SaveValidator(
            self.serializer,
            current_version=self.config.current_version,
            minimum_version=self.config.minimum_version,
        )
        self.event_bus = event_bus

        self._locks = SlotLockRegistry()

        # Auto-save settings
        self._auto_save_lock = threading.Lock()
        self._auto_save_config = AutoSaveConfig(
            enabled=False,
            interval_seconds=self.config.auto_save_interval,
            slot_id=self.config.auto_save_slot,
        )
        self._scheduler: Optional[AutoSaveScheduler] = None

    def _publish(self, event_type: SaveEvent, **data: Any) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, **data)

    # Save / load

    def save(
        self,
        slot_id: str,
        description: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> SaveResult:
        """
        Save the current game state to a slot.

        Args:
            slot_id: Slot name ("slot1", "autosave", ...)
            description: Optional text stored with the save
            cancel: Token checked before the slot's files are replaced

        Returns:
            SaveResult (success=False with error/exception on any failure)

        Raises:
            InvalidSlotError: Blank slot id.
        """
        sanitize_slot_id(slot_id)
        start = time.perf_counter()
        self.logger.info(f"Starting save operation for slot {slot_id}")
        self._publish(SaveEvent.SAVE_STARTED, slot_id=slot_id)

        try:
            with self._locks.lock(slot_id):
                snapshot = self.provider.create_snapshot(description)
                sealed, payload = self.serializer.seal(snapshot)
                metadata = SaveMetadata.from_snapshot(slot_id, sealed)
                self.store.write(slot_id, payload, metadata, cancel)
        except Exception as e:
            duration = time.perf_counter() - start
            self.logger.exception(f"Save operation failed for slot {slot_id}")
            self._publish(SaveEvent.SAVE_FAILED, slot_id=slot_id, error=str(e))
            return SaveResult(
                success=False,
                slot_id=slot_id,
                duration=duration,
                error=str(e),
                exception=e,
            )

        duration = time.perf_counter() - start
        self.logger.info(
            f"Save completed successfully: Slot={slot_id}, Size={len(payload)} bytes, "
            f"Duration={duration * 1000:.0f}ms"
        )
        self._publish(SaveEvent.SAVE_COMPLETED, slot_id=slot_id, file_size_bytes=len(payload))
        return SaveResult(
            success=True,
            slot_id=slot_id,
            duration=duration,
            file_size_bytes=len(payload),
        )

    def load(self, slot_id: str, cancel: Optional[CancellationToken] = None) -> LoadResult:
        """
        Load a slot and restore it through the provider.

        The payload is fully validated first; a failed load never restores
        anything.

        Returns:
            LoadResult. On failure, exception is one of SaveNotFoundError,
            SaveCorruptedError, SaveVersionIncompatibleError,
            SaveValidationError or another SaveError from the store.

        Raises:
            InvalidSlotError: Blank slot id.
        """
        sanitize_slot_id(slot_id)
        start = time.perf_counter()
        self.logger.info(f"Starting load operation for slot {slot_id}")
        self._publish(SaveEvent.LOAD_STARTED, slot_id=slot_id)

        try:
            with self._locks.lock(slot_id):
                payload = self.store.read(slot_id, cancel)

                validation = self.validator.validate(payload)
                if not validation.is_valid:
                    raise self._load_failure(slot_id, validation)

                snapshot = self.serializer.deserialize(payload, slot_id)
                if not self.provider.validate_snapshot(snapshot):
                    raise SaveValidationError(
                        ValidationResult(exists=True, errors=["Snapshot structure is invalid"]),
                        "Snapshot validation failed",
                    )
                self.provider.restore_snapshot(snapshot)
        except Exception as e:
            duration = time.perf_counter() - start
            if isinstance(e, SaveNotFoundError):
                self.logger.warning(f"Load failed: {e}")
            else:
                self.logger.exception(f"Load operation failed for slot {slot_id}")
            self._publish(SaveEvent.LOAD_FAILED, slot_id=slot_id, error=str(e))
            return LoadResult(
                success=False,
                slot_id=slot_id,
                duration=duration,
                error=str(e),
                exception=e,
            )

        duration = time.perf_counter() - start
        self.logger.info(
            f"Load completed successfully: Slot={slot_id}, Duration={duration * 1000:.0f}ms"
        )
        self._publish(SaveEvent.LOAD_COMPLETED, slot_id=slot_id)
        return LoadResult(
            success=True,
            slot_id=slot_id,
            snapshot=snapshot,
            duration=duration,
            was_migrated=False,
            original_version=snapshot.save_version,
        )

    def _load_failure(self, slot_id: str, validation: ValidationResult) -> SaveError:
        """Pick the exception that best describes a failed validation."""
        if not validation.exists or not validation.checksum_valid:
            return SaveCorruptedError(
                slot_id,
                f"Save file for slot {slot_id} is corrupted: " + "; ".join(validation.errors),
            )
        if not validation.version_compatible:
            return SaveVersionIncompatibleError(
                validation.save_version, self.validator.current_version
            )
        return SaveValidationError(validation)

    # Slot management

    def delete(self, slot_id: str, cancel: Optional[CancellationToken] = None) -> bool:
        """
        Delete a save slot.

        Returns:
            True if the slot existed and was removed.
        """
        sanitize_slot_id(slot_id)
        self.logger.info(f"Deleting save slot {slot_id}")

        try:
            with self._locks.lock(slot_id):
                deleted = self.store.delete(slot_id, cancel)
        except SaveError as e:
            self.logger.error(f"Failed to delete slot {slot_id}: {e}")
            return False

        if deleted:
            self._publish(SaveEvent.SAVE_DELETED, slot_id=slot_id)
        return deleted

    def get_save_slots(self) -> list[SaveMetadata]:
        """Metadata for every slot, newest first."""
        slots = self.store.list_all_metadata()
        self.logger.info(f"Found {len(slots)} save slots")
        return slots

    def get_save_metadata(self, slot_id: str) -> Optional[SaveMetadata]:
        """Metadata for one slot; None for a blank id or a missing slot."""
        if slot_id is None or not str(slot_id).strip():
            return None
        return self.store.get_metadata(slot_id)

    def validate(self, slot_id: str, cancel: Optional[CancellationToken] = None) -> ValidationResult:
        """
        Validate a slot without loading it.

        Disagreements between the payload and its metadata sidecar are
        reported as warnings.
        """
        sanitize_slot_id(slot_id)
        self.logger.info(f"Validating save slot {slot_id}")

        try:
            with self._locks.lock(slot_id):
                result = self.validator.validate(self.store.read(slot_id, cancel))
                result.warnings.extend(self.store.check_consistency(slot_id))
        except SaveNotFoundError:
            return ValidationResult(
                exists=False,
                errors=[f"Save file not found: {slot_id}"],
            )
        except SaveError as e:
            self.logger.error(f"Validation failed for slot {slot_id}: {e}")
            return ValidationResult(
                exists=True,
                errors=[f"Validation error: {e}"],
            )
        return result

    # Auto-save

    def configure_auto_save(self, enabled: bool, interval_seconds: int = 300) -> None:
        """
        Enable or disable timed auto-saves.

        Raises:
            ValueError: interval_seconds is below 30.
        """
        if interval_seconds < MIN_AUTO_SAVE_INTERVAL:
            raise ValueError(
                f"Auto-save interval must be at least {MIN_AUTO_SAVE_INTERVAL} seconds"
            )

        self.logger.info(f"Configuring auto-save: Enabled={enabled}, Interval={interval_seconds}s")

        with self._auto_save_lock:
            self._auto_save_config.enabled = enabled
            self._auto_save_config.interval_seconds = interval_seconds
            previous = self._scheduler
            current = AutoSaveScheduler(interval_seconds, self._auto_save_tick) if enabled else None
            self._scheduler = current

        # Stopped outside the lock: an in-flight tick takes it on success.
        if previous is not None:
            previous.stop()

        if current is not None:
            current.start()
        else:
            self.logger.info("Auto-save disabled")

    def get_auto_save_config(self) -> AutoSaveConfig:
        """Copy of the current auto-save settings."""
        with self._auto_save_lock:
            return dataclasses.replace(self._auto_save_config)

    @property
    def auto_save_scheduler(self) -> Optional[AutoSaveScheduler]:
        """Running auto-save timer, if auto-save is enabled."""
        return self._scheduler

    def auto_save(self) -> SaveResult:
        """Save to the auto-save slot now."""
        slot_id = self._auto_save_config.slot_id
        self.logger.info("Auto-save triggered")
        self._publish(SaveEvent.AUTO_SAVE_TRIGGERED, slot_id=slot_id)

        result = self.save(slot_id, AUTO_SAVE_DESCRIPTION)
        if result.success:
            with self._auto_save_lock:
                self._auto_save_config.last_auto_save = datetime.now(timezone.utc)
            self.logger.info("Auto-save completed successfully")
        else:
            self.logger.warning(f"Auto-save failed: {result.error}")
        return result

    def _auto_save_tick(self) -> None:
        if self._auto_save_config.enabled:
            self.auto_save()

    # Export / import

    def export_save(
        self,
        slot_id: str,
        destination_path: str | Path,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """
        Copy a slot's save file to an external path.

        Returns:
            False if the slot does not exist or the copy failed.
        """
        sanitize_slot_id(slot_id)
        if destination_path is None or not str(destination_path).strip():
            raise ValueError("Destination path cannot be null or empty")

        self.logger.info(f"Exporting save from slot {slot_id} to {destination_path}")
        try:
            with self._locks.lock(slot_id):
                exported = self.store.copy_to(slot_id, destination_path, cancel)
        except SaveError as e:
            self.logger.warning(f"Export of slot {slot_id} failed: {e}")
            return False

        if exported:
            self._publish(SaveEvent.SAVE_EXPORTED, slot_id=slot_id, path=str(destination_path))
        return exported

    def import_save(
        self,
        source_path: str | Path,
        target_slot_id: str,
        cancel: Optional[CancellationToken] = None,
    ) -> ImportResult:
        """
        Validate an external save file and copy it into a slot.

        The source is read once; exactly the validated bytes are written,
        with a fresh sidecar. An invalid file is rejected before the target
        slot is touched.
        """
        if source_path is None or not str(source_path).strip():
            raise ValueError("Source path cannot be null or empty")
        sanitize_slot_id(target_slot_id)

        self.logger.info(f"Importing save from {source_path} to slot {target_slot_id}")

        try:
            if cancel is not None:
                cancel.raise_if_cancelled(
                    lambda: OperationCancelledError(f"Import into slot {target_slot_id} cancelled")
                )
            data = Path(source_path).read_bytes()
            validation = self.validator.validate(data)
            if not validation.is_valid:
                self.logger.warning(f"Import validation failed for {source_path}")
                return ImportResult(
                    success=False,
                    target_slot_id=target_slot_id,
                    validation_result=validation,
                    error="Save file validation failed",
                )

            # Commit the bytes that were validated, never a second read of the source.
            snapshot = self.serializer.deserialize(data, target_slot_id)
            metadata = SaveMetadata.from_snapshot(target_slot_id, snapshot)
            with self._locks.lock(target_slot_id):
                self.store.write(target_slot_id, data, metadata, cancel)
        except Exception as e:
            self.logger.exception(f"Import failed from {source_path}")
            return ImportResult(
                success=False,
                target_slot_id=target_slot_id,
                validation_result=ValidationResult(errors=[str(e)]),
                error=str(e),
            )

        self.logger.info(f"Successfully imported save to slot {target_slot_id}")
        self._publish(SaveEvent.SAVE_IMPORTED, slot_id=target_slot_id, path=str(source_path))
        return ImportResult(
            success=True,
            target_slot_id=target_slot_id,
            validation_result=validation,
        )

    # Lifecycle

    def close(self) -> None:
        """Stop auto-save. The manager can still be used for manual saves."""
        with self._auto_save_lock:
            scheduler = self._scheduler
            self._scheduler = None
            self._auto_save_config.enabled = False

        if scheduler is not None:
            scheduler.stop()

    def __enter__(self) -> SaveManager:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Properties

    @property
    def save_directory(self) -> Path:
        return self.store.save_directory
