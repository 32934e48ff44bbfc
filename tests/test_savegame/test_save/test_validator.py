import pytest

from savegame.save.validator import SaveValidator
from savegame.snapshot.models import (
    BoxData,
    GameStateSnapshot,
    MoveData,
    PlayerData,
    PokedexData,
)
from savegame.snapshot.version import SaveVersion


def _sealed_payload(serializer, snapshot):
    _, payload = serializer.seal(snapshot)
    return payload


def test_valid_payload(serializer, validator, sample_snapshot):
    result = validator.validate(_sealed_payload(serializer, sample_snapshot))

    assert result.is_valid
    assert result.exists
    assert result.checksum_valid
    assert result.version_compatible
    assert result.save_version == SaveVersion(1, 0, 0)
    assert result.errors == []


def test_empty_payload(validator):
    result = validator.validate(b"")

    assert not result.is_valid
    assert not result.exists
    assert result.errors


def test_unparseable_payload(validator):
    result = validator.validate(b"{garbage")

    assert not result.is_valid
    assert result.exists
    assert not result.checksum_valid
    assert "corrupted" in result.errors[0]


def test_flipped_byte_fails_checksum(serializer, validator, sample_snapshot):
    payload = bytearray(_sealed_payload(serializer, sample_snapshot))
    index = payload.index(b'"Ash"') + 1
    payload[index] = ord("B")

    result = validator.validate(bytes(payload))

    assert not result.checksum_valid
    assert not result.is_valid
    assert any("Checksum validation failed" in e for e in result.errors)


def test_every_single_bit_flip_is_caught(serializer, validator, sample_snapshot):
    payload = _sealed_payload(serializer, sample_snapshot)
    for index in range(len(payload)):
        for bit in range(8):
            damaged = bytearray(payload)
            damaged[index] ^= 1 << bit
            result = validator.validate(bytes(damaged))
            assert result.checksum_valid is False, f"byte {index} bit {bit} flip went unnoticed"
            assert not result.is_valid


def test_same_value_respelled_fails_checksum(serializer, validator, sample_snapshot):
    sealed, payload = serializer.seal(sample_snapshot)
    player_id = str(sealed.player.player_id).encode("ascii")
    respelled = payload.replace(player_id, player_id.upper())
    assert respelled != payload

    result = validator.validate(respelled)

    assert result.checksum_valid is False
    assert not result.is_valid
    assert any("Checksum validation failed" in e for e in result.errors)


def test_missing_checksum_is_a_warning(serializer, validator, sample_snapshot):
    result = validator.validate(serializer.serialize(sample_snapshot))

    assert result.is_valid
    assert result.checksum_valid
    assert any("no checksum" in w for w in result.warnings)


@pytest.mark.parametrize("version, compatible", [
    ("0.9.0", False),
    ("1.0.0", True),
    ("1.2.0", True),
    ("1.3.0", False),
])
def test_version_window(serializer, sample_snapshot, version, compatible):
    validator = SaveValidator(serializer, current_version="1.2.0", minimum_version="1.0.0")
    snapshot = sample_snapshot.model_copy(update={"save_version": SaveVersion.parse(version)})

    result = validator.validate(_sealed_payload(serializer, snapshot))

    assert result.version_compatible is compatible
    assert result.is_valid is compatible
    if not compatible:
        assert any("not compatible" in e for e in result.errors)


def test_minimum_newer_than_current_rejected(serializer):
    with pytest.raises(ValueError):
        SaveValidator(serializer, current_version="1.0.0", minimum_version="2.0.0")


def test_is_version_compatible(validator):
    assert validator.is_version_compatible("1.0.0")
    assert not validator.is_version_compatible("2.0.0")
    assert not validator.is_version_compatible(None)
    assert not validator.is_version_compatible("nonsense")


def test_missing_player_is_error(validator):
    result = validator.validate_snapshot(GameStateSnapshot(player=None))

    assert not result.is_valid
    assert "Player data is missing" in result.errors


def test_blank_player_fields_are_warnings(validator):
    result = validator.validate_snapshot(GameStateSnapshot(player=PlayerData(name=" ")))

    assert result.is_valid
    assert "Player name is empty" in result.warnings
    assert "Player current map is empty" in result.warnings


def test_negative_playtime(validator):
    result = validator.validate_snapshot(
        GameStateSnapshot(player=PlayerData(name="Ash", playtime_seconds=-1))
    )
    assert "Player playtime is negative" in result.errors


def test_party_of_six_passes(validator, sample_snapshot, make_creature):
    snapshot = sample_snapshot.model_copy(update={"party": [make_creature(i) for i in range(1, 7)]})
    assert validator.validate_snapshot(snapshot).is_valid


def test_party_of_seven_fails(validator, sample_snapshot, make_creature):
    snapshot = sample_snapshot.model_copy(update={"party": [make_creature(i) for i in range(1, 8)]})
    result = validator.validate_snapshot(snapshot)

    assert not result.is_valid
    assert any("7" in e and "6" in e for e in result.errors)


def test_null_and_empty_party_are_warnings(validator, sample_snapshot):
    assert any("Party is null" in w for w in
               validator.validate_snapshot(sample_snapshot.model_copy(update={"party": None})).warnings)
    assert any("Party is empty" in w for w in
               validator.validate_snapshot(sample_snapshot.model_copy(update={"party": []})).warnings)


def test_hp_above_max_fails(validator, sample_snapshot, make_creature):
    snapshot = sample_snapshot.model_copy(update={"party": [make_creature(current_hp=50, max_hp=40)]})
    result = validator.validate_snapshot(snapshot)

    assert not result.is_valid
    assert any("CurrentHP 50 exceeds MaxHP 40" in e for e in result.errors)


def test_hp_at_max_passes(validator, sample_snapshot, make_creature):
    snapshot = sample_snapshot.model_copy(update={"party": [make_creature(current_hp=40, max_hp=40)]})
    assert validator.validate_snapshot(snapshot).is_valid


def test_creature_rules(validator, sample_snapshot, make_creature):
    moves = [MoveData(move_id=i) for i in range(5)]
    party = [
        make_creature(current_hp=-1),
        make_creature(current_hp=0, max_hp=0),
        make_creature(level=0),
        make_creature(level=101),
        make_creature(moves=moves),
        make_creature(moves=[]),
    ]
    result = validator.validate_snapshot(sample_snapshot.model_copy(update={"party": party}))
    text = " | ".join(result.errors)

    assert "Party creature 0: CurrentHP is negative" in text
    assert "Party creature 1: MaxHP must be positive" in text
    assert "Party creature 2: Level 0 is out of valid range" in text
    assert "Party creature 3: Level 101 is out of valid range" in text
    assert "Party creature 4: Has 5 moves (maximum is 4)" in text
    assert "Party creature 5: Has no moves" in result.warnings


def test_box_creatures_are_checked(validator, sample_snapshot, make_creature):
    box = BoxData.empty(1)
    box.creatures[3] = make_creature(level=150)
    result = validator.validate_snapshot(sample_snapshot.model_copy(update={"boxes": [box]}))

    assert any(e.startswith("Box 1 slot 3: Level 150") for e in result.errors)


def test_missing_sections_are_warnings(validator, sample_snapshot):
    snapshot = sample_snapshot.model_copy(update={
        "inventory": None, "world": None, "progress": None, "pokedex": None,
    })
    result = validator.validate_snapshot(snapshot)

    assert result.is_valid
    assert len(result.warnings) == 4


def test_caught_more_than_seen_fails(validator, sample_snapshot):
    snapshot = sample_snapshot.model_copy(update={"pokedex": PokedexData(seen={1, 2}, caught={1, 2, 3})})
    result = validator.validate_snapshot(snapshot)

    assert not result.is_valid
    assert any("Pokedex" in e for e in result.errors)


def test_caught_subset_of_seen_passes(validator, sample_snapshot):
    snapshot = sample_snapshot.model_copy(update={"pokedex": PokedexData(seen={1, 2}, caught={1})})
    assert validator.validate_snapshot(snapshot).is_valid


def test_caught_but_never_seen_fails(validator, sample_snapshot):
    snapshot = sample_snapshot.model_copy(update={"pokedex": PokedexData(seen={1, 2}, caught={3})})
    result = validator.validate_snapshot(snapshot)

    assert any("never seen: [3]" in e for e in result.errors)


def test_structural_errors_flow_into_payload_result(serializer, validator, sample_snapshot, make_creature):
    snapshot = sample_snapshot.model_copy(update={"party": [make_creature(current_hp=50, max_hp=40)]})
    result = validator.validate(_sealed_payload(serializer, snapshot))

    assert result.checksum_valid
    assert result.version_compatible
    assert not result.is_valid
