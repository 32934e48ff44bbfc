import sys
import logging
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from savecore.core.config import SaveConfig
from savegame.save import FileSystemSlotStore, JsonSaveSerializer, SaveError, SaveValidator
from savegame.save.store import SAVE_FILE_EXTENSION


def main(save_dir: Optional[str] = None) -> int:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("SaveVerification")

    config = SaveConfig.from_env(**({"save_directory": save_dir} if save_dir else {}))
    root = config.resolve_save_directory()
    if not root.is_dir():
        logger.error(f"VERIFICATION FAILED: save directory does not exist: {root}")
        return 1

    store = FileSystemSlotStore(root)
    serializer = JsonSaveSerializer(pretty_print=config.pretty_print)
    validator = SaveValidator(serializer, config.current_version, config.minimum_version)

    slot_ids = sorted(p.name[:-len(SAVE_FILE_EXTENSION)] for p in root.glob(f"*{SAVE_FILE_EXTENSION}"))
    logger.info(f"Verifying {len(slot_ids)} save slots in {root}")

    failed = 0
    for slot_id in slot_ids:
        try:
            payload = store.read(slot_id)
        except SaveError as e:
            logger.error(f"[{slot_id}] {e}")
            failed += 1
            continue

        result = validator.validate(payload)
        for warning in result.warnings + store.check_consistency(slot_id):
            logger.warning(f"[{slot_id}] {warning}")
        for error in result.errors:
            logger.error(f"[{slot_id}] {error}")
        if not result.is_valid:
            failed += 1

    if failed:
        logger.error(f"VERIFICATION FAILED: {failed} of {len(slot_ids)} save slots are invalid.")
        return 1

    logger.info("VERIFICATION SUCCESSFUL: All save slots are valid.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
