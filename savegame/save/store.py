"""
File system slot store.

Layout under one root directory:

    <root>/<slot>.sav                    payload bytes
    <root>/Metadata/<slot>.meta.json     indented JSON sidecar

The store knows nothing about snapshots: it moves opaque payload bytes and
SaveMetadata records. Slot ids are sanitized before any path is built so
an id can never escape the root.

Payload and sidecar are each replaced atomically, but the pair is not a
transaction: a crash between the two replaces leaves a payload with a
missing or stale sidecar. check_consistency() reports that state.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import jsonschema
from pydantic import ValidationError

from savecore.core.cancellation import CancellationToken
from savegame.save.errors import (
    InvalidSlotError,
    OperationCancelledError,
    SaveError,
    SaveNotFoundError,
)
from savegame.snapshot.metadata import SaveMetadata

SAVE_FILE_EXTENSION = ".sav"
METADATA_FILE_EXTENSION = ".meta.json"
METADATA_DIRECTORY = "Metadata"

# Characters rejected in file names on at least one supported platform,
# plus every control character.
_INVALID_FILENAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(i) for i in range(32))

# Sidecars may lag the payload by this much before being called stale.
_STALE_TOLERANCE_SECONDS = 2.0

METADATA_SCHEMA = SaveMetadata.model_json_schema(mode="serialization")


def sanitize_slot_id(slot_id: Optional[str]) -> str:
    """
    Strip characters that are invalid in a file name.

    Raises:
        InvalidSlotError: slot_id is None, blank, or has no valid characters.
    """
    if slot_id is None or not str(slot_id).strip():
        raise InvalidSlotError("Slot ID cannot be null or empty")
    sanitized = "".join(c for c in str(slot_id) if c not in _INVALID_FILENAME_CHARS).strip()
    if not sanitized or set(sanitized) == {"."}:
        raise InvalidSlotError(f"Slot ID has no valid file name characters: {slot_id!r}")
    return sanitized


def _check_cancel(cancel: Optional[CancellationToken], what: str) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled(lambda: OperationCancelledError(f"{what} cancelled"))


def _write_temp(path: Path, data: bytes) -> Path:
    """Write data to a temp file beside path; the caller replaces or removes it."""
    fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return Path(tmp_name)


class FileSystemSlotStore:
    """
    Stores save slots as files under a root directory.

    Usage:
        store = FileSystemSlotStore("saves")
        store.write("slot1", payload, metadata)
        data = store.read("slot1")
        for meta in store.list_all_metadata():
            print(meta)
    """

    def __init__(self, save_directory: str | Path):
        self.logger = logging.getLogger(__name__)
        self.save_directory = Path(save_directory)
        self.metadata_directory = self.save_directory / METADATA_DIRECTORY

        self.save_directory.mkdir(parents=True, exist_ok=True)
        self.metadata_directory.mkdir(parents=True, exist_ok=True)

        self.logger.info(f"Save directory initialized: {self.save_directory}")

    # Paths

    def resolve_path(self, slot_id: str) -> Path:
        """Payload file path for a slot (for diagnostics)."""
        return self.save_directory / f"{sanitize_slot_id(slot_id)}{SAVE_FILE_EXTENSION}"

    def metadata_path(self, slot_id: str) -> Path:
        """Sidecar file path for a slot."""
        return self.metadata_directory / f"{sanitize_slot_id(slot_id)}{METADATA_FILE_EXTENSION}"

    # Writing

    def write(
        self,
        slot_id: str,
        payload: bytes,
        metadata: SaveMetadata,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """
        Write a payload and its sidecar.

        Both files are staged as temp files first; the cancellation token
        is checked before either replaces the slot's current files.

        Raises:
            InvalidSlotError: Blank slot id.
            ValueError: Empty payload or missing metadata.
            OperationCancelledError: Cancelled before commit (slot untouched).
            SaveError: The files could not be written.
        """
        save_path = self.resolve_path(slot_id)
        meta_path = self.metadata_path(slot_id)
        if not payload:
            raise ValueError("Save data cannot be null or empty")
        if metadata is None:
            raise ValueError("Metadata is required")

        _check_cancel(cancel, f"Write of slot {slot_id}")

        metadata = metadata.model_copy(update={
            "file_size_bytes": len(payload),
            "last_modified": datetime.now(timezone.utc),
        })

        staged: list[Path] = []
        try:
            self.logger.info(f"Writing save file to {save_path} ({len(payload)} bytes)")
            staged.append(_write_temp(save_path, payload))
            staged.append(_write_temp(meta_path, self._encode_metadata(metadata)))

            _check_cancel(cancel, f"Write of slot {slot_id}")

            os.replace(staged[0], save_path)
            os.replace(staged[1], meta_path)
        except OperationCancelledError:
            self.logger.warning(f"Write of slot {slot_id} cancelled before commit")
            raise
        except OSError as e:
            self.logger.error(f"Failed to write save file for slot {slot_id}: {e}")
            raise SaveError(f"Failed to write save file for slot {slot_id}") from e
        finally:
            for tmp in staged:
                tmp.unlink(missing_ok=True)

        self.logger.info(f"Successfully wrote save file and metadata for slot {slot_id}")
        return True

    def write_metadata(self, slot_id: str, metadata: SaveMetadata) -> bool:
        """
        Rewrite only the sidecar of an existing payload.

        Size and modified time are taken from the payload file on disk.
        """
        save_path = self.resolve_path(slot_id)
        meta_path = self.metadata_path(slot_id)
        if not save_path.exists():
            raise SaveNotFoundError(slot_id)

        stat = save_path.stat()
        metadata = metadata.model_copy(update={
            "file_size_bytes": stat.st_size,
            "last_modified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        })
        tmp = _write_temp(meta_path, self._encode_metadata(metadata))
        try:
            os.replace(tmp, meta_path)
        except OSError as e:
            self.logger.error(f"Failed to write metadata for slot {slot_id}: {e}")
            raise SaveError(f"Failed to write metadata for slot {slot_id}") from e
        finally:
            tmp.unlink(missing_ok=True)
        return True

    # Reading

    def read(self, slot_id: str, cancel: Optional[CancellationToken] = None) -> bytes:
        """
        Read a slot's payload bytes.

        Raises:
            SaveNotFoundError: No payload file for the sanitized id.
            OperationCancelledError: Cancelled before the read.
            SaveError: The file exists but could not be read.
        """
        save_path = self.resolve_path(slot_id)
        if not save_path.exists():
            self.logger.warning(f"Save file not found for slot {slot_id}: {save_path}")
            raise SaveNotFoundError(slot_id)

        _check_cancel(cancel, f"Read of slot {slot_id}")

        try:
            data = save_path.read_bytes()
        except FileNotFoundError as e:
            raise SaveNotFoundError(slot_id) from e
        except OSError as e:
            self.logger.error(f"Failed to read save file for slot {slot_id}: {e}")
            raise SaveError(f"Failed to read save file for slot {slot_id}") from e

        self.logger.info(f"Read save file for slot {slot_id} ({len(data)} bytes)")
        return data

    def exists(self, slot_id: str) -> bool:
        """True if the slot has a payload file. Blank ids never exist."""
        try:
            return self.resolve_path(slot_id).exists()
        except InvalidSlotError:
            return False

    def delete(self, slot_id: str, cancel: Optional[CancellationToken] = None) -> bool:
        """
        Delete a slot's payload and sidecar.

        Returns:
            False if the slot had no payload, True once deleted.
        """
        save_path = self.resolve_path(slot_id)
        meta_path = self.metadata_path(slot_id)
        _check_cancel(cancel, f"Delete of slot {slot_id}")

        if not save_path.exists():
            self.logger.warning(f"Save file not found for deletion, slot {slot_id}")
            meta_path.unlink(missing_ok=True)
            return False

        try:
            save_path.unlink()
            meta_path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to delete save file for slot {slot_id}: {e}")
            raise SaveError(f"Failed to delete save file for slot {slot_id}") from e

        self.logger.info(f"Deleted save file for slot {slot_id}")
        return True

    # Metadata

    def get_metadata(self, slot_id: str) -> Optional[SaveMetadata]:
        """Sidecar for a slot, or None if blank id, missing, or unreadable."""
        try:
            meta_path = self.metadata_path(slot_id)
        except InvalidSlotError:
            return None

        if not meta_path.exists():
            self.logger.debug(f"Metadata file not found for slot {slot_id}")
            return None

        try:
            return self._read_metadata_file(meta_path)
        except (OSError, ValueError, jsonschema.ValidationError) as e:
            self.logger.error(f"Failed to read metadata for slot {slot_id}: {e}")
            return None

    def list_all_metadata(self) -> list[SaveMetadata]:
        """
        Sidecars for every slot, newest first.

        Unreadable, schema-invalid and orphaned sidecars are skipped with a
        warning; the listing itself never fails.
        """
        found: list[SaveMetadata] = []
        try:
            meta_files = sorted(self.metadata_directory.glob(f"*{METADATA_FILE_EXTENSION}"))
        except OSError as e:
            self.logger.error(f"Failed to list metadata directory {self.metadata_directory}: {e}")
            return found

        listed_stems: set[str] = set()
        for meta_file in meta_files:
            stem = meta_file.name[:-len(METADATA_FILE_EXTENSION)]
            listed_stems.add(stem)

            if not (self.save_directory / f"{stem}{SAVE_FILE_EXTENSION}").exists():
                self.logger.warning(f"Skipping orphaned metadata file (no payload): {meta_file}")
                continue

            try:
                found.append(self._read_metadata_file(meta_file))
            except jsonschema.ValidationError as e:
                self.logger.warning(f"Validation error in {meta_file}: {e.message}")
            except (OSError, ValueError) as e:
                self.logger.warning(f"Failed to read metadata file {meta_file}: {e}")

        for payload_file in self.save_directory.glob(f"*{SAVE_FILE_EXTENSION}"):
            if payload_file.stem not in listed_stems:
                self.logger.warning(f"Save file has no metadata sidecar: {payload_file}")

        found.sort(key=lambda m: m.last_modified, reverse=True)
        self.logger.info(f"Found {len(found)} save files with metadata")
        return found

    def check_consistency(self, slot_id: str) -> list[str]:
        """
        Compare a slot's payload and sidecar.

        Returns:
            Warning messages; empty when both files agree or both are absent.
        """
        save_path = self.resolve_path(slot_id)
        meta_path = self.metadata_path(slot_id)
        has_payload = save_path.exists()
        has_meta = meta_path.exists()

        if not has_payload and not has_meta:
            return []
        if has_payload and not has_meta:
            return [f"Save file for slot {slot_id} has no metadata sidecar"]
        if has_meta and not has_payload:
            return [f"Metadata for slot {slot_id} exists but the save file is missing"]

        metadata = self.get_metadata(slot_id)
        if metadata is None:
            return [f"Metadata for slot {slot_id} is unreadable"]

        warnings = []
        stat = save_path.stat()
        if metadata.file_size_bytes != stat.st_size:
            warnings.append(
                f"Metadata for slot {slot_id} is stale: records {metadata.file_size_bytes} bytes, "
                f"save file has {stat.st_size}"
            )
        payload_mtime = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        lag = (payload_mtime - metadata.last_modified).total_seconds()
        if lag > _STALE_TOLERANCE_SECONDS:
            warnings.append(
                f"Metadata for slot {slot_id} is older than its save file by {lag:.0f}s"
            )
        return warnings

    # Import / export

    def copy_to(
        self,
        slot_id: str,
        destination_path: str | Path,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """
        Copy a slot's payload file to an external location.

        Raises:
            SaveNotFoundError: The slot has no payload.
        """
        if destination_path is None or not str(destination_path).strip():
            raise ValueError("Destination path cannot be null or empty")

        save_path = self.resolve_path(slot_id)
        if not save_path.exists():
            raise SaveNotFoundError(slot_id)

        _check_cancel(cancel, f"Export of slot {slot_id}")

        destination = Path(destination_path)
        try:
            self.logger.info(f"Copying save file from {save_path} to {destination}")
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(save_path, destination)
        except OSError as e:
            self.logger.error(f"Failed to copy save file for slot {slot_id}: {e}")
            return False
        return True

    def copy_from(
        self,
        source_path: str | Path,
        slot_id: str,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """
        Copy an external payload file into a slot (payload only).

        Raises:
            FileNotFoundError: The source file does not exist.
        """
        if source_path is None or not str(source_path).strip():
            raise ValueError("Source path cannot be null or empty")

        target_path = self.resolve_path(slot_id)
        source = Path(source_path)
        if not source.is_file():
            raise FileNotFoundError(f"Source file not found: {source}")

        _check_cancel(cancel, f"Import into slot {slot_id}")

        try:
            self.logger.info(f"Importing save file from {source} to slot {slot_id}")
            tmp = _write_temp(target_path, source.read_bytes())
            try:
                _check_cancel(cancel, f"Import into slot {slot_id}")
                os.replace(tmp, target_path)
            finally:
                tmp.unlink(missing_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to import save file from {source}: {e}")
            return False
        return True

    # Internals

    def _encode_metadata(self, metadata: SaveMetadata) -> bytes:
        return metadata.model_dump_json(indent=2).encode('utf-8')

    def _read_metadata_file(self, path: Path) -> SaveMetadata:
        """
        Load and check one sidecar.

        Raises:
            OSError, ValueError (bad JSON / model mismatch),
            jsonschema.ValidationError (shape mismatch)
        """
        data = json.loads(path.read_text(encoding='utf-8'))
        jsonschema.validate(instance=data, schema=METADATA_SCHEMA)
        try:
            return SaveMetadata.model_validate(data)
        except ValidationError as e:
            raise ValueError(str(e)) from e
