import logging
import os
from pathlib import Path
from typing import Optional
from vbo.domain.models import SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)

def original_for_temp(temp_path: Path) -> Optional[Path]:
    """Maps `<name><ext>.tmp<ext>` back to `<name><ext>`, else None."""
    ext = temp_path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        return None
    head = temp_path.name[: -len(ext)]
    if not head.endswith(".tmp"):
        return None
    original_name = head[: -len(".tmp")]
    if Path(original_name).suffix.lower() != ext:
        return None
    return temp_path.with_name(original_name)

class HousekeepingService:
    """Resolves temp outputs left behind by an interrupted earlier run.

    A temp file whose original is missing is only restored when
    `restore_orphans` is set. The rewrite strategy deletes the original before
    writing, so under it such a file is the only surviving copy. Otherwise it
    is treated as an ordinary asset and left alone.
    """

    def __init__(self, restore_orphans: bool = False):
        self.restore_orphans = restore_orphans

    def cleanup_temp_files(self, directory: Path) -> int:
        """Removes stale temp outputs; returns how many were handled."""
        handled = 0
        if not Path(directory).is_dir():
            return handled
        for root, dirs, files in os.walk(directory):
            for file in files:
                temp_path = Path(root) / file
                original = original_for_temp(temp_path)
                if original is None:
                    continue
                try:
                    if original.exists():
                        temp_path.unlink()
                        logger.info(f"Removed stale temp file: {temp_path}")
                    elif self.restore_orphans:
                        os.replace(temp_path, original)
                        logger.warning(f"Restored {original.name} from leftover temp file")
                    else:
                        logger.info(f"Leaving {temp_path} in place: no original to restore")
                        continue
                    handled += 1
                except OSError as e:
                    logger.warning(f"Could not clean up {temp_path}: {e}")
        return handled
