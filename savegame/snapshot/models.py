"""
Game state snapshot - the root record written to a save slot.

A snapshot is one complete capture of the simulation: player, party,
storage boxes, inventory, world, battle in progress, story progress,
pokedex and mod data. It is built by the game's snapshot provider and
treated as read-only once built; the save flow derives a sealed copy with
its checksum instead of mutating it.

Models only enforce types. Range rules (party of six, HP bounds, level
1-100, four moves, caught species must be seen) are checked by
SaveValidator so that a damaged or hand-edited save can still be decoded
and reported on.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, Optional

from pydantic import Field, PlainSerializer

from savecore.core.model import SaveModel
from savegame.snapshot.mod_data import ModValue
from savegame.snapshot.version import CURRENT_SAVE_VERSION, SaveVersion, VersionField

MAX_PARTY_SIZE = 6
MAX_MOVES = 4
MIN_LEVEL = 1
MAX_LEVEL = 100
BOX_CAPACITY = 30

# Sets are written as sorted lists so equal snapshots always encode to
# identical bytes, whatever the process hash seed.
StrSet = Annotated[set[str], PlainSerializer(sorted, return_type=list[str])]
IntSet = Annotated[set[int], PlainSerializer(sorted, return_type=list[int])]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GameStateKind(str, Enum):
    """High-level mode the game was in when captured."""
    MENU = "menu"
    OVERWORLD = "overworld"
    BATTLE = "battle"
    CUTSCENE = "cutscene"
    POKEMON_CENTER = "pokemon_center"
    SHOP = "shop"
    GYM = "gym"
    INVENTORY = "inventory"


class Position(SaveModel):
    """Tile-space position on the current map."""
    x: float = 0.0
    y: float = 0.0


class PlayerData(SaveModel):
    """
    Player identity and progress counters.

    Attributes:
        player_id: Unique id of this playthrough's player
        name: Player name shown in slot lists
        position: Position on current_map
        current_map: Map/location id
        money: Currency held
        playtime_seconds: Cumulative playtime
        trainer_id: Public trainer number
        badge_count: Badges earned
        gender: Optional appearance choice
    """
    player_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    position: Position = Field(default_factory=Position)
    current_map: str = ""
    money: int = 0
    playtime_seconds: int = 0
    trainer_id: int = 0
    badge_count: int = 0
    gender: Optional[str] = None


class BaseStats(SaveModel):
    """Battle stats (HP is tracked separately on the creature)."""
    attack: int = 0
    defense: int = 0
    special_attack: int = 0
    special_defense: int = 0
    speed: int = 0

    @property
    def total(self) -> int:
        return self.attack + self.defense + self.special_attack + self.special_defense + self.speed


class StatBlock(SaveModel):
    """Per-stat values including HP, used for individual and effort values."""
    hp: int = 0
    attack: int = 0
    defense: int = 0
    special_attack: int = 0
    special_defense: int = 0
    speed: int = 0


class MoveData(SaveModel):
    """A known move and its remaining uses."""
    move_id: int
    name: str = ""
    current_pp: int = 0
    max_pp: int = 0


class CreatureData(SaveModel):
    """
    One creature in the party, a box, or an opposing team.

    Attributes:
        instance_id: Unique id of this individual
        species_id: Pokedex number
        nickname: Optional custom name
        level: Current level (valid range 1-100)
        experience: Experience points
        current_hp: Current HP (0..max_hp)
        max_hp: Maximum HP (> 0)
        stats: Base battle stats
        individual_values: IVs
        effort_values: EVs
        nature: Nature name
        ability: Ability name
        held_item: Optional held item id
        moves: Known moves (at most 4)
        status_condition: Optional status (poison, paralysis...)
        is_shiny: Shiny flag
        original_trainer: Name of the original owner
        friendship: Friendship counter
    """
    instance_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    species_id: int
    nickname: Optional[str] = None
    level: int = 1
    experience: int = 0
    current_hp: int = 1
    max_hp: int = 1
    stats: BaseStats = Field(default_factory=BaseStats)
    individual_values: StatBlock = Field(default_factory=StatBlock)
    effort_values: StatBlock = Field(default_factory=StatBlock)
    nature: str = ""
    ability: str = ""
    held_item: Optional[str] = None
    moves: Optional[list[MoveData]] = Field(default_factory=list)
    status_condition: Optional[str] = None
    is_shiny: bool = False
    original_trainer: str = ""
    friendship: int = 0

    @property
    def display_name(self) -> str:
        return self.nickname or f"#{self.species_id}"


class BoxData(SaveModel):
    """A storage box: fixed number of slots, each empty (None) or holding a creature."""
    box_number: int
    name: str = ""
    creatures: list[Optional[CreatureData]] = Field(
        default_factory=lambda: [None] * BOX_CAPACITY
    )

    @classmethod
    def empty(cls, box_number: int, name: str = "") -> BoxData:
        return cls(box_number=box_number, name=name or f"Box {box_number}")

    @property
    def occupied(self) -> int:
        return sum(1 for c in self.creatures if c is not None)


class InventoryData(SaveModel):
    """Bag contents by pocket."""
    items: dict[str, int] = Field(default_factory=dict)
    key_items: list[str] = Field(default_factory=list)
    tms: dict[str, int] = Field(default_factory=dict)
    berries: dict[str, int] = Field(default_factory=dict)


class MapData(SaveModel):
    """Per-map state."""
    map_id: str
    collected_items: StrSet = Field(default_factory=set)
    visited_areas: StrSet = Field(default_factory=set)


class WorldData(SaveModel):
    """World state: flags, visited maps, defeated trainers, clock."""
    flags: StrSet = Field(default_factory=set)
    maps: dict[str, MapData] = Field(default_factory=dict)
    defeated_trainers: StrSet = Field(default_factory=set)
    time_of_day: timedelta = timedelta(hours=12)


class BattleData(SaveModel):
    """Encounter in progress at capture time."""
    battle_type: str = "wild"
    opponent_creatures: list[CreatureData] = Field(default_factory=list)
    turn_number: int = 0
    active_player_creatures: list[int] = Field(default_factory=list)
    active_opponent_creatures: list[int] = Field(default_factory=list)
    weather: Optional[str] = None
    terrain: Optional[str] = None


class ProgressData(SaveModel):
    """Story progression."""
    story_flags: StrSet = Field(default_factory=set)
    badges: list[str] = Field(default_factory=list)
    defeated_gym_leaders: StrSet = Field(default_factory=set)
    elite_four_defeated: bool = False
    encountered_legendaries: StrSet = Field(default_factory=set)


class PokedexData(SaveModel):
    """Species seen and caught. Every caught species must also be seen."""
    seen: IntSet = Field(default_factory=set)
    caught: IntSet = Field(default_factory=set)

    @property
    def total_seen(self) -> int:
        return len(self.seen)

    @property
    def total_caught(self) -> int:
        return len(self.caught)


class GameStateSnapshot(SaveModel):
    """
    Complete game state at a point in time.

    Sections other than save_version/created_at are optional at the type
    level; the validator decides which absences are fatal (player) and
    which are only warnings (inventory, world, progress, pokedex, party).
    """
    save_version: VersionField = CURRENT_SAVE_VERSION
    created_at: datetime = Field(default_factory=_utc_now)
    description: Optional[str] = None
    game_state: GameStateKind = GameStateKind.OVERWORLD

    player: Optional[PlayerData] = None
    party: Optional[list[CreatureData]] = Field(default_factory=list)
    boxes: list[BoxData] = Field(default_factory=list)
    inventory: Optional[InventoryData] = Field(default_factory=InventoryData)
    world: Optional[WorldData] = Field(default_factory=WorldData)
    current_battle: Optional[BattleData] = None
    progress: Optional[ProgressData] = Field(default_factory=ProgressData)
    pokedex: Optional[PokedexData] = Field(default_factory=PokedexData)

    mod_data: dict[str, ModValue] = Field(default_factory=dict)

    checksum: Optional[str] = None

    @property
    def version(self) -> SaveVersion:
        return self.save_version

    def without_checksum(self) -> GameStateSnapshot:
        """Copy of this snapshot with the checksum field cleared."""
        return self.model_copy(update={"checksum": None})

    def with_checksum(self, checksum: str) -> GameStateSnapshot:
        """Copy of this snapshot carrying the given checksum."""
        return self.model_copy(update={"checksum": checksum})
