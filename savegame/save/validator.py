"""
Save validation - integrity, version and structure checks.

Two tiers:
- validate(payload): raw bytes -> decode, checksum, version, structure
- validate_snapshot(snapshot): structural rules only

Findings are split into errors (block loading) and warnings (reported,
load continues with defaults).
"""

from __future__ import annotations

import logging
from typing import Optional

from savegame.save.errors import SaveError
from savegame.save.results import ValidationResult
from savegame.save.serializer import JsonSaveSerializer
from savegame.snapshot.models import (
    BOX_CAPACITY,
    MAX_LEVEL,
    MAX_MOVES,
    MAX_PARTY_SIZE,
    MIN_LEVEL,
    CreatureData,
    GameStateSnapshot,
)
from savegame.snapshot.version import CURRENT_SAVE_VERSION, MINIMUM_SAVE_VERSION, SaveVersion


class SaveValidator:
    """
    Validates payloads and snapshots.

    Args:
        serializer: Serializer used to decode payloads and recompute checksums
        current_version: Newest save format this build writes
        minimum_version: Oldest save format this build still reads
    """

    def __init__(
        self,
        serializer: JsonSaveSerializer,
        current_version: SaveVersion | str = CURRENT_SAVE_VERSION,
        minimum_version: SaveVersion | str = MINIMUM_SAVE_VERSION,
    ):
        self.logger = logging.getLogger(__name__)
        self.serializer = serializer
        self.current_version = SaveVersion.parse(current_version)
        self.minimum_supported_version = SaveVersion.parse(minimum_version)
        if self.minimum_supported_version > self.current_version:
            raise ValueError(
                f"Minimum version {self.minimum_supported_version} is newer than "
                f"current version {self.current_version}"
            )

    def is_version_compatible(self, version: Optional[SaveVersion | str]) -> bool:
        """True if version lies in [minimum_supported_version, current_version]."""
        if version is None:
            return False
        try:
            version = SaveVersion.parse(version)
        except ValueError:
            return False
        return self.minimum_supported_version <= version <= self.current_version

    def validate(self, payload: Optional[bytes]) -> ValidationResult:
        """Run every check on a raw payload."""
        result = ValidationResult(exists=bool(payload))

        if not result.exists:
            result.errors.append("Save data is null or empty")
            return result

        try:
            snapshot = self.serializer.deserialize(payload)
        except SaveError as e:
            self.logger.error(f"Save validation failed: {e}")
            result.errors.append(str(e))
            return result

        checksum_ok = self.serializer.verify_payload(bytes(payload), snapshot)
        if checksum_ok is None:
            result.checksum_valid = True
            result.warnings.append("Save file has no checksum - integrity cannot be verified")
        else:
            result.checksum_valid = checksum_ok
            if not checksum_ok:
                result.errors.append("Checksum validation failed - save file may be corrupted")

        result.save_version = snapshot.save_version
        result.version_compatible = self.is_version_compatible(snapshot.save_version)
        if not result.version_compatible:
            result.errors.append(
                f"Save version {snapshot.save_version} is not compatible with current version "
                f"{self.current_version} (supported: {self.minimum_supported_version} "
                f"to {self.current_version})"
            )

        result.merge(self.validate_snapshot(snapshot))

        result.is_valid = (
            not result.errors and result.checksum_valid and result.version_compatible
        )
        self.logger.info(
            f"Save validation completed: Valid={result.is_valid}, "
            f"Errors={len(result.errors)}, Warnings={len(result.warnings)}"
        )
        return result

    def validate_snapshot(self, snapshot: Optional[GameStateSnapshot]) -> ValidationResult:
        """
        Check structural rules on a decoded snapshot.

        Only is_valid, exists, errors and warnings are meaningful on the
        returned result; checksum and version belong to payload validation.
        """
        result = ValidationResult(exists=snapshot is not None)
        if snapshot is None:
            result.errors.append("Snapshot is null")
            return result

        self._check_player(snapshot, result)
        self._check_party(snapshot, result)
        self._check_boxes(snapshot, result)

        if snapshot.inventory is None:
            result.warnings.append("Inventory is null - assuming empty inventory")
        if snapshot.world is None:
            result.warnings.append("World data is null")
        if snapshot.progress is None:
            result.warnings.append("Progress data is null")

        self._check_pokedex(snapshot, result)

        result.is_valid = not result.errors
        return result

    # Rules

    def _check_player(self, snapshot: GameStateSnapshot, result: ValidationResult) -> None:
        player = snapshot.player
        if player is None:
            result.errors.append("Player data is missing")
            return

        if not player.name or not player.name.strip():
            result.warnings.append("Player name is empty")
        if not player.current_map or not player.current_map.strip():
            result.warnings.append("Player current map is empty")
        if player.playtime_seconds < 0:
            result.errors.append("Player playtime is negative")

    def _check_party(self, snapshot: GameStateSnapshot, result: ValidationResult) -> None:
        party = snapshot.party
        if party is None:
            result.warnings.append("Party is null - assuming empty party")
            return

        if not party:
            result.warnings.append("Party is empty - player has no creatures")
        if len(party) > MAX_PARTY_SIZE:
            result.errors.append(
                f"Party has {len(party)} creatures (maximum is {MAX_PARTY_SIZE})"
            )

        for i, creature in enumerate(party):
            self._check_creature(f"Party creature {i}", creature, result)

    def _check_boxes(self, snapshot: GameStateSnapshot, result: ValidationResult) -> None:
        for box in snapshot.boxes:
            if len(box.creatures) > BOX_CAPACITY:
                result.warnings.append(
                    f"Box {box.box_number} has {len(box.creatures)} slots (capacity is {BOX_CAPACITY})"
                )
            for slot, creature in enumerate(box.creatures):
                if creature is not None:
                    self._check_creature(f"Box {box.box_number} slot {slot}", creature, result)

    def _check_creature(self, label: str, creature: CreatureData, result: ValidationResult) -> None:
        if creature.current_hp < 0:
            result.errors.append(f"{label}: CurrentHP is negative")
        if creature.max_hp <= 0:
            result.errors.append(f"{label}: MaxHP must be positive")
        if creature.current_hp > creature.max_hp:
            result.errors.append(
                f"{label}: CurrentHP {creature.current_hp} exceeds MaxHP {creature.max_hp}"
            )
        if not MIN_LEVEL <= creature.level <= MAX_LEVEL:
            result.errors.append(
                f"{label}: Level {creature.level} is out of valid range ({MIN_LEVEL}-{MAX_LEVEL})"
            )

        moves = creature.moves or []
        if not moves:
            result.warnings.append(f"{label}: Has no moves")
        elif len(moves) > MAX_MOVES:
            result.errors.append(f"{label}: Has {len(moves)} moves (maximum is {MAX_MOVES})")

    def _check_pokedex(self, snapshot: GameStateSnapshot, result: ValidationResult) -> None:
        pokedex = snapshot.pokedex
        if pokedex is None:
            result.warnings.append("Pokedex data is null")
            return

        if pokedex.total_caught > pokedex.total_seen:
            result.errors.append(
                f"Pokedex: More species caught ({pokedex.total_caught}) "
                f"than seen ({pokedex.total_seen})"
            )
            return

        unseen = sorted(pokedex.caught - pokedex.seen)
        if unseen:
            result.errors.append(f"Pokedex: Species caught but never seen: {unseen}")
