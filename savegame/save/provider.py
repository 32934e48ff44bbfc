"""
Snapshot provider - the seam between the save framework and the game.

SaveManager never reads game systems directly. It asks a provider for a
snapshot when saving and hands the decoded snapshot back when loading.
"""

from __future__ import annotations

import logging
import random
import threading
from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

from savegame.snapshot.models import (
    GameStateKind,
    GameStateSnapshot,
    PlayerData,
    Position,
)
from savegame.snapshot.version import CURRENT_SAVE_VERSION


@runtime_checkable
class SnapshotProvider(Protocol):
    """What SaveManager needs from the running game."""

    def create_snapshot(self, description: Optional[str] = None) -> GameStateSnapshot:
        ...

    def restore_snapshot(self, snapshot: GameStateSnapshot) -> None:
        ...

    def validate_snapshot(self, snapshot: GameStateSnapshot) -> bool:
        ...


class GameStateManager:
    """
    In-memory snapshot provider.

    Holds the live game state as a snapshot and hands out fresh copies.
    Until something is restored into it, snapshots describe a new game:
    a player named "Player" standing in PalletTown at noon.

    Usage:
        state = GameStateManager()
        state.set_current_state(GameStateKind.BATTLE)
        snapshot = state.create_snapshot("Before gym")
    """

    DEFAULT_PLAYER_NAME = "Player"
    DEFAULT_MAP = "PalletTown"

    def __init__(self, player_name: str = DEFAULT_PLAYER_NAME, current_map: str = DEFAULT_MAP):
        self.logger = logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._current_state = GameStateKind.MENU
        self._state: Optional[GameStateSnapshot] = None
        self._player_name = player_name
        self._current_map = current_map

    def create_snapshot(self, description: Optional[str] = None) -> GameStateSnapshot:
        """Capture the current state as a new snapshot (fresh created_at, no checksum)."""
        self.logger.info("Creating game state snapshot")
        with self._lock:
            base = self._state if self._state is not None else self._new_game_state()
            snapshot = base.model_copy(deep=True, update={
                "save_version": CURRENT_SAVE_VERSION,
                "created_at": datetime.now(timezone.utc),
                "description": description,
                "game_state": self._current_state,
                "checksum": None,
            })

        self.logger.info("Game state snapshot created successfully")
        return snapshot

    def restore_snapshot(self, snapshot: GameStateSnapshot) -> None:
        """
        Replace the live state with a snapshot.

        Raises:
            ValueError: The snapshot fails validate_snapshot().
        """
        if snapshot is None:
            raise ValueError("Snapshot cannot be None")

        self.logger.info(f"Restoring game state from snapshot (version {snapshot.save_version})")
        if not self.validate_snapshot(snapshot):
            raise ValueError("Cannot restore invalid snapshot")

        with self._lock:
            self._state = snapshot.without_checksum().model_copy(deep=True)
            self._current_state = snapshot.game_state

        player = snapshot.player
        self.logger.info(
            f"Game state restored: Player={player.name}, Map={player.current_map or 'Unknown'}, "
            f"Playtime={player.playtime_seconds}s"
        )

    def validate_snapshot(self, snapshot: Optional[GameStateSnapshot]) -> bool:
        """Minimal semantic check: a player with a non-blank name."""
        if snapshot is None:
            self.logger.warning("Snapshot validation failed: snapshot is null")
            return False
        if snapshot.player is None:
            self.logger.warning("Snapshot validation failed: player data is null")
            return False
        if not snapshot.player.name or not snapshot.player.name.strip():
            self.logger.warning("Snapshot validation failed: player name is empty")
            return False

        self.logger.debug("Snapshot validation passed")
        return True

    def get_current_state(self) -> GameStateKind:
        return self._current_state

    def set_current_state(self, state: GameStateKind) -> None:
        previous = self._current_state
        self._current_state = GameStateKind(state)
        self.logger.info(f"Game state changed: {previous.value} -> {self._current_state.value}")

    @property
    def current_snapshot(self) -> Optional[GameStateSnapshot]:
        """Last restored state, or None for a new game."""
        with self._lock:
            return self._state

    def _new_game_state(self) -> GameStateSnapshot:
        return GameStateSnapshot(
            player=PlayerData(
                name=self._player_name,
                position=Position(x=0, y=0),
                current_map=self._current_map,
                trainer_id=random.randint(10000, 99999),
            ),
        )
