import logging
import os
import shutil
from pathlib import Path
from vbo.config.models import ReplaceStrategy
from vbo.domain.errors import SwapError
from vbo.domain.models import CandidateFile


class AtomicReplacer:
    """Moves a transcoded temp file over its original.

    `rename` swaps with a single os.replace; the temp file sits in the same
    directory so readers see either the old or the new content. `rewrite`
    keeps the legacy delete/write/delete sequence, which loses the original if
    interrupted between the delete and the write.
    """

    def __init__(self, strategy: ReplaceStrategy = ReplaceStrategy.RENAME):
        self.strategy = ReplaceStrategy(strategy)
        self.logger = logging.getLogger(__name__)

    def replace(self, candidate: CandidateFile, temp_path: Path) -> None:
        """Raises SwapError on failure; the temp file never survives a failure."""
        try:
            if self.strategy == ReplaceStrategy.RENAME:
                os.replace(temp_path, candidate.path)
            else:
                self._rewrite(candidate.path, temp_path)
        except OSError as e:
            self._remove_temp(temp_path)
            raise SwapError(f"Failed to replace {candidate.path.name}: {e}") from e

    def _rewrite(self, original: Path, temp_path: Path) -> None:
        original.unlink()
        with open(temp_path, "rb") as src, open(original, "wb") as dst:
            shutil.copyfileobj(src, dst)
        temp_path.unlink()

    def _remove_temp(self, temp_path: Path) -> None:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Could not remove temp file {temp_path}: {e}")
