from datetime import timedelta

import pytest
from pydantic import ValidationError

from savegame.snapshot.models import (
    BOX_CAPACITY,
    BoxData,
    GameStateKind,
    GameStateSnapshot,
    PokedexData,
    WorldData,
)
from savegame.snapshot.version import CURRENT_SAVE_VERSION


def test_snapshot_defaults():
    snapshot = GameStateSnapshot()

    assert snapshot.save_version == CURRENT_SAVE_VERSION
    assert snapshot.created_at.tzinfo is not None
    assert snapshot.game_state == GameStateKind.OVERWORLD
    assert snapshot.player is None
    assert snapshot.party == []
    assert snapshot.current_battle is None
    assert snapshot.checksum is None
    assert snapshot.world.time_of_day == timedelta(hours=12)


def test_save_version_dumped_as_text():
    data = GameStateSnapshot().model_dump(mode="json")
    assert data["save_version"] == "1.0.0"
    assert GameStateSnapshot.model_validate(data).save_version == CURRENT_SAVE_VERSION


def test_sets_dump_sorted():
    world = WorldData(flags={"zeta", "alpha", "mid"})
    pokedex = PokedexData(seen={25, 1, 7}, caught={7, 1})

    assert world.model_dump(mode="json")["flags"] == ["alpha", "mid", "zeta"]
    assert pokedex.model_dump(mode="json") == {"seen": [1, 7, 25], "caught": [1, 7]}


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        GameStateSnapshot.model_validate({"not_a_field": 1})


def test_box_starts_empty():
    box = BoxData.empty(1)
    assert box.name == "Box 1"
    assert len(box.creatures) == BOX_CAPACITY
    assert box.occupied == 0


def test_checksum_copies_leave_original_untouched(sample_snapshot):
    sealed = sample_snapshot.with_checksum("abc")

    assert sealed.checksum == "abc"
    assert sample_snapshot.checksum is None
    assert sealed.without_checksum().checksum is None


def test_creature_display_name(make_creature):
    assert make_creature(25, nickname="Sparky").display_name == "Sparky"
    assert make_creature(4).display_name == "#4"


def test_clone_is_deep(sample_snapshot):
    clone = sample_snapshot.clone()
    clone.party[0].nickname = "Changed"
    assert sample_snapshot.party[0].nickname == "Sparky"
