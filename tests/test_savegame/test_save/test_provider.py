import pytest

from savegame.save.provider import GameStateManager, SnapshotProvider
from savegame.snapshot.models import GameStateKind, GameStateSnapshot, PlayerData
from savegame.snapshot.version import CURRENT_SAVE_VERSION


def test_satisfies_protocol(game_state_manager):
    assert isinstance(game_state_manager, SnapshotProvider)


def test_new_game_snapshot(game_state_manager):
    snapshot = game_state_manager.create_snapshot("first")

    assert snapshot.description == "first"
    assert snapshot.save_version == CURRENT_SAVE_VERSION
    assert snapshot.checksum is None
    assert snapshot.player.name == "Player"
    assert snapshot.player.current_map == "PalletTown"
    assert 10000 <= snapshot.player.trainer_id <= 99999
    assert snapshot.game_state == GameStateKind.MENU


def test_each_snapshot_is_fresh(game_state_manager):
    first = game_state_manager.create_snapshot()
    second = game_state_manager.create_snapshot()

    assert second.created_at >= first.created_at
    first.player.name = "Mutated"
    assert game_state_manager.create_snapshot().player.name != "Mutated"


def test_restore_then_snapshot(game_state_manager, sample_snapshot):
    sealed = sample_snapshot.with_checksum("xyz").model_copy(update={"game_state": GameStateKind.GYM})
    game_state_manager.restore_snapshot(sealed)

    snapshot = game_state_manager.create_snapshot("again")

    assert game_state_manager.get_current_state() == GameStateKind.GYM
    assert snapshot.player.name == "Ash"
    assert snapshot.checksum is None
    assert snapshot.description == "again"
    assert game_state_manager.current_snapshot.checksum is None


def test_restore_rejects_invalid(game_state_manager):
    with pytest.raises(ValueError):
        game_state_manager.restore_snapshot(GameStateSnapshot(player=PlayerData(name="  ")))
    with pytest.raises(ValueError):
        game_state_manager.restore_snapshot(None)


def test_validate_snapshot(game_state_manager, sample_snapshot):
    assert game_state_manager.validate_snapshot(sample_snapshot)
    assert not game_state_manager.validate_snapshot(None)
    assert not game_state_manager.validate_snapshot(GameStateSnapshot())


def test_state_tracking(game_state_manager):
    game_state_manager.set_current_state(GameStateKind.BATTLE)
    assert game_state_manager.get_current_state() == GameStateKind.BATTLE

    game_state_manager.set_current_state("shop")
    assert game_state_manager.get_current_state() == GameStateKind.SHOP
