import os
import sys
import pytest

# Ensure savecore/savegame modules can be imported
sys.path.append(os.getcwd())


@pytest.fixture
def save_dir(tmp_path):
    """Empty save root for each test."""
    path = tmp_path / "saves"
    path.mkdir()
    return path


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from savecore.core.events import EventBus
    return EventBus()


@pytest.fixture
def serializer():
    from savegame.save.serializer import JsonSaveSerializer
    return JsonSaveSerializer()


@pytest.fixture
def store(save_dir):
    from savegame.save.store import FileSystemSlotStore
    return FileSystemSlotStore(save_dir)


@pytest.fixture
def validator(serializer):
    from savegame.save.validator import SaveValidator
    return SaveValidator(serializer)


@pytest.fixture
def game_state_manager():
    from savegame.save.provider import GameStateManager
    return GameStateManager()


@pytest.fixture
def save_manager(game_state_manager, serializer, store, validator, event_bus):
    """SaveManager over a temp directory; auto-save stopped on teardown."""
    from savegame.save.manager import SaveManager
    manager = SaveManager(
        game_state_manager,
        serializer=serializer,
        store=store,
        validator=validator,
        event_bus=event_bus,
    )
    yield manager
    manager.close()


@pytest.fixture
def make_creature():
    """Factory for party creatures with sane defaults."""
    from savegame.snapshot.models import CreatureData, MoveData

    def _make(species_id=25, **overrides):
        fields = {
            "species_id": species_id,
            "level": 10,
            "current_hp": 30,
            "max_hp": 30,
            "moves": [MoveData(move_id=1, name="Tackle", current_pp=35, max_pp=35)],
        }
        fields.update(overrides)
        return CreatureData(**fields)

    return _make


@pytest.fixture
def sample_snapshot(make_creature):
    """Snapshot with a player, a two-creature party and some progress."""
    from savegame.snapshot.models import (
        GameStateSnapshot,
        PlayerData,
        Position,
        PokedexData,
        ProgressData,
        WorldData,
    )
    from savegame.snapshot.mod_data import wrap

    return GameStateSnapshot(
        description="Before gym",
        player=PlayerData(
            name="Ash",
            position=Position(x=4, y=7),
            current_map="PewterCity",
            money=1500,
            playtime_seconds=3725,
            trainer_id=12345,
            badge_count=1,
        ),
        party=[make_creature(25, nickname="Sparky"), make_creature(1)],
        world=WorldData(flags={"met_oak", "got_parcel"}, defeated_trainers={"bug_catcher_1"}),
        progress=ProgressData(badges=["Boulder"], story_flags={"intro_done"}),
        pokedex=PokedexData(seen={1, 4, 7, 25}, caught={1, 25}),
        mod_data={"mymod.reputation": wrap(12), "mymod.flags": wrap({"unlocked": True})},
    )
