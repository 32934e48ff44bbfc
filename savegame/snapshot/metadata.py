"""
Save slot metadata sidecar.

A small record written next to every payload so slot lists can be shown
without decoding full snapshots.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from savecore.core.model import SaveModel
from savegame.snapshot.models import GameStateSnapshot
from savegame.snapshot.version import CURRENT_SAVE_VERSION, VersionField

UNKNOWN = "Unknown"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SaveMetadata(SaveModel):
    """
    Summary of one save slot.

    file_size_bytes and last_modified are owned by the slot store and
    overwritten whenever the slot is written.
    """
    slot_id: str
    player_name: str = UNKNOWN
    current_location: str = UNKNOWN
    playtime_seconds: int = 0
    party_count: int = 0
    badge_count: int = 0
    pokedex_caught: int = 0
    pokedex_seen: int = 0
    created_at: datetime = Field(default_factory=_utc_now)
    last_modified: datetime = Field(default_factory=_utc_now)
    save_version: VersionField = CURRENT_SAVE_VERSION
    description: Optional[str] = None
    file_size_bytes: int = 0
    is_corrupted: bool = False
    requires_migration: bool = False

    @classmethod
    def from_snapshot(cls, slot_id: str, snapshot: GameStateSnapshot) -> SaveMetadata:
        """Summarize a snapshot for the given slot."""
        player = snapshot.player
        pokedex = snapshot.pokedex
        return cls(
            slot_id=slot_id,
            player_name=player.name if player and player.name else UNKNOWN,
            current_location=player.current_map if player and player.current_map else UNKNOWN,
            playtime_seconds=player.playtime_seconds if player else 0,
            party_count=len(snapshot.party) if snapshot.party else 0,
            badge_count=player.badge_count if player else 0,
            pokedex_caught=pokedex.total_caught if pokedex else 0,
            pokedex_seen=pokedex.total_seen if pokedex else 0,
            created_at=snapshot.created_at,
            last_modified=_utc_now(),
            save_version=snapshot.save_version,
            description=snapshot.description,
        )

    @property
    def playtime_formatted(self) -> str:
        """Playtime as HH:MM:SS."""
        hours = self.playtime_seconds // 3600
        minutes = (self.playtime_seconds % 3600) // 60
        seconds = self.playtime_seconds % 60
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def __str__(self) -> str:
        return (
            f"{self.player_name} - {self.current_location} - "
            f"Badges: {self.badge_count} - Playtime: {self.playtime_formatted}"
        )
