"""
Snapshot serialization and integrity checksums.

Payloads are UTF-8 JSON with sorted keys. The checksum is a base64 SHA-256
digest computed over the payload with its own checksum field cleared, using
a two-pass seal:

    1. serialize the snapshot with checksum=None     -> payload_1
    2. digest = compute_checksum(payload_1)
    3. set checksum = digest on (a copy of) the snapshot
    4. serialize again                               -> payload_2 (persisted)

Verification mirrors it: decode payload_2, strip the checksum, re-serialize
and compare digests. Hashing payload_2 directly would never match.

Re-serializing alone cannot see edits that decode to the same value
("+00:00" for "Z", hex case in a UUID, extra whitespace), so verify_payload
also requires the stored bytes to be exactly the compact or indented
encoding of what they decode to.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from typing import Optional

from pydantic import ValidationError

from savegame.save.errors import SaveCorruptedError, SaveSerializationError
from savegame.snapshot.models import GameStateSnapshot

UNKNOWN_SLOT = "unknown"


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return f"invalid value at '{location}': {first.get('msg', 'validation failed')}"


def _encode(data: dict, pretty: bool) -> str:
    if pretty:
        return json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False)
    return json.dumps(data, sort_keys=True, separators=(',', ':'), ensure_ascii=False)


class JsonSaveSerializer:
    """
    JSON encoder/decoder for GameStateSnapshot.

    Args:
        pretty_print: Indent payloads for hand inspection. Payloads in
            either form verify under either setting; any other spelling
            of the same data does not.
    """

    def __init__(self, pretty_print: bool = False):
        self.pretty_print = pretty_print
        self.logger = logging.getLogger(__name__)

    # Encoding

    def serialize_to_string(self, snapshot: GameStateSnapshot) -> str:
        """Encode a snapshot to JSON text."""
        if snapshot is None:
            raise SaveSerializationError("Cannot serialize: snapshot is None")
        try:
            return _encode(snapshot.model_dump(mode="json"), self.pretty_print)
        except Exception as e:
            self.logger.error(f"Failed to serialize game state snapshot: {e}")
            raise SaveSerializationError(f"Failed to serialize save data: {e}") from e

    def serialize(self, snapshot: GameStateSnapshot) -> bytes:
        """Encode a snapshot to payload bytes."""
        return self.serialize_to_string(snapshot).encode('utf-8')

    # Decoding

    def deserialize_from_string(self, text: str, slot_id: str = UNKNOWN_SLOT) -> GameStateSnapshot:
        """
        Decode JSON text into a snapshot.

        Raises:
            SaveCorruptedError: Text is blank, not JSON, null, or does not
                match the snapshot model. The message names the line/column
                or field where decoding failed.
        """
        if text is None or not text.strip():
            raise SaveCorruptedError(slot_id, "Save data is empty")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            self.logger.error(f"Failed to deserialize save data - JSON parse error: {e}")
            raise SaveCorruptedError(
                slot_id,
                f"Save file is corrupted: JSON parse error at line {e.lineno} column {e.colno}: {e.msg}",
            ) from e

        if data is None:
            raise SaveCorruptedError(slot_id, "Save file is corrupted: payload decodes to null")
        if not isinstance(data, dict):
            raise SaveCorruptedError(
                slot_id,
                f"Save file is corrupted: expected a JSON object, got {type(data).__name__}",
            )

        try:
            return GameStateSnapshot.model_validate(data)
        except ValidationError as e:
            self.logger.error(f"Failed to deserialize save data - schema mismatch: {e}")
            raise SaveCorruptedError(
                slot_id, f"Save file is corrupted: {_describe_validation_error(e)}"
            ) from e

    def deserialize(self, payload: bytes, slot_id: str = UNKNOWN_SLOT) -> GameStateSnapshot:
        """Decode payload bytes into a snapshot (see deserialize_from_string)."""
        if not payload:
            raise SaveCorruptedError(slot_id, "Save data is empty")

        self.logger.debug(f"Deserializing game state snapshot ({len(payload)} bytes)")
        try:
            text = bytes(payload).decode('utf-8')
        except UnicodeDecodeError as e:
            self.logger.error(f"Failed to deserialize save data - invalid UTF-8 at byte {e.start}")
            raise SaveCorruptedError(
                slot_id, f"Save file is corrupted: invalid UTF-8 at byte {e.start}"
            ) from e
        return self.deserialize_from_string(text, slot_id)

    # Checksums

    def compute_checksum(self, payload: bytes) -> str:
        """Base64-encoded SHA-256 digest of the payload (44 characters)."""
        if not payload:
            raise ValueError("Data cannot be empty")
        return base64.b64encode(hashlib.sha256(payload).digest()).decode('ascii')

    def validate_checksum(self, payload: bytes, expected_checksum: Optional[str]) -> bool:
        """True if the payload hashes to expected_checksum. Never raises."""
        if not payload or not expected_checksum or not expected_checksum.strip():
            return False

        actual = self.compute_checksum(payload)
        if actual != expected_checksum:
            self.logger.warning(
                f"Checksum validation failed. Expected: {expected_checksum}, Actual: {actual}"
            )
            return False
        return True

    def seal(self, snapshot: GameStateSnapshot) -> tuple[GameStateSnapshot, bytes]:
        """
        Run the two-pass checksum flow.

        Returns:
            (sealed snapshot carrying its checksum, payload to persist)
        """
        unsealed_payload = self.serialize(snapshot.without_checksum())
        sealed = snapshot.with_checksum(self.compute_checksum(unsealed_payload))
        return sealed, self.serialize(sealed)

    def strip_checksum(self, snapshot: GameStateSnapshot) -> tuple[GameStateSnapshot, Optional[str]]:
        """Split a decoded snapshot into (copy without checksum, stored checksum)."""
        return snapshot.without_checksum(), snapshot.checksum

    def verify(self, snapshot: GameStateSnapshot) -> Optional[bool]:
        """
        Check a decoded snapshot against its own stored checksum.

        Returns:
            None if the snapshot carries no checksum, else whether it matches.
        """
        stripped, checksum = self.strip_checksum(snapshot)
        if not checksum or not checksum.strip():
            return None
        return self.validate_checksum(self.serialize(stripped), checksum)

    def canonical_form(self, payload: bytes, snapshot: GameStateSnapshot) -> Optional[bool]:
        """
        Which canonical encoding the payload is, if any.

        Returns:
            True for indented, False for compact, None if the bytes are
            neither encoding of the snapshot they decode to.
        """
        data = snapshot.model_dump(mode="json")
        for pretty in (False, True):
            if bytes(payload) == _encode(data, pretty).encode('utf-8'):
                return pretty
        return None

    def verify_payload(self, payload: bytes, snapshot: GameStateSnapshot) -> Optional[bool]:
        """
        Check stored bytes against the checksum they carry.

        Args:
            payload: Bytes exactly as read from storage
            snapshot: The payload, decoded

        Returns:
            None if the snapshot carries no checksum. Otherwise True only if
            the payload is a canonical encoding and its digest matches.
        """
        stripped, checksum = self.strip_checksum(snapshot)
        if not checksum or not checksum.strip():
            return None

        pretty = self.canonical_form(payload, snapshot)
        if pretty is None:
            self.logger.warning("Checksum validation failed: payload is not canonically encoded")
            return False
        unsealed = _encode(stripped.model_dump(mode="json"), pretty).encode('utf-8')
        return self.validate_checksum(unsealed, checksum)
