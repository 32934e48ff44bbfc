import pytest

import verify_saves
from savegame.save.errors import SaveError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("SAVEGAME_SAVE_DIR", raising=False)
    monkeypatch.delenv("SAVEGAME_PRETTY_PRINT", raising=False)


def test_all_valid(save_manager, save_dir):
    save_manager.save("slot1")
    save_manager.save("slot2")

    assert verify_saves.main(str(save_dir)) == 0


def test_empty_directory_is_valid(save_dir):
    assert verify_saves.main(str(save_dir)) == 0


def test_corrupted_slot_fails(save_manager, save_dir, caplog):
    save_manager.save("slot1")
    save_manager.save("slot2")
    save_manager.store.resolve_path("slot2").write_bytes(b"{broken")

    assert verify_saves.main(str(save_dir)) == 1
    assert "[slot2]" in caplog.text


def test_missing_directory_fails(tmp_path):
    assert verify_saves.main(str(tmp_path / "nowhere")) == 1


def test_directory_from_environment(monkeypatch, save_manager, save_dir):
    save_manager.save("slot1")
    monkeypatch.setenv("SAVEGAME_SAVE_DIR", str(save_dir))

    assert verify_saves.main() == 0


def test_unreadable_slot_is_counted_and_others_still_checked(monkeypatch, save_manager, save_dir, caplog):
    save_manager.save("slot1")
    save_manager.save("slot2")
    save_manager.save("slot3")
    original_read = verify_saves.FileSystemSlotStore.read
    read_slots = []

    def read(self, slot_id, cancel=None):
        read_slots.append(slot_id)
        if slot_id == "slot2":
            raise SaveError("Failed to read save file for slot slot2")
        return original_read(self, slot_id, cancel)

    monkeypatch.setattr(verify_saves.FileSystemSlotStore, "read", read)

    assert verify_saves.main(str(save_dir)) == 1
    assert read_slots == ["slot1", "slot2", "slot3"]
    assert "[slot2] Failed to read save file" in caplog.text
    assert "1 of 3 save slots are invalid" in caplog.text
