import pytest

from savegame.snapshot.version import CURRENT_SAVE_VERSION, SaveVersion


def test_parse_forms():
    assert SaveVersion.parse("1.2.3") == SaveVersion(1, 2, 3)
    assert SaveVersion.parse("2.1") == SaveVersion(2, 1, 0)
    assert SaveVersion.parse([1, 0, 4]) == SaveVersion(1, 0, 4)
    assert SaveVersion.parse(CURRENT_SAVE_VERSION) is CURRENT_SAVE_VERSION


@pytest.mark.parametrize("bad", ["", "1.x", "1.2.3.4", "-1.0", None, 3, [True, 0]])
def test_parse_rejects_garbage(bad):
    with pytest.raises(ValueError):
        SaveVersion.parse(bad)


def test_ordering_is_numeric():
    assert SaveVersion(1, 2, 0) < SaveVersion(1, 10, 0)
    assert SaveVersion(0, 9, 9) < SaveVersion(1, 0, 0) <= SaveVersion(1, 0, 0)


def test_str():
    assert str(SaveVersion(1, 0, 0)) == "1.0.0"
