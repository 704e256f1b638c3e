import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional
from vbo.domain.models import CandidateFile, SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)

def matches_exclude(file_name: str, pattern: str) -> bool:
    """".ext" patterns compare extensions case-insensitively; anything else is a
    case-sensitive substring test on the base name."""
    if pattern.startswith("."):
        return Path(file_name).suffix.lower() == pattern.lower()
    return pattern in file_name

def is_candidate(file_name: str, exclude: Iterable[str] = ()) -> bool:
    if Path(file_name).suffix.lower() not in SUPPORTED_EXTENSIONS:
        return False
    return not any(matches_exclude(file_name, pattern) for pattern in exclude)

class FileScanner:
    """Recursively scans a build tree for video files to optimize."""

    def __init__(self, exclude: Optional[List[str]] = None):
        self.exclude = list(exclude or [])

    def _on_walk_error(self, error: OSError):
        logger.warning(f"Skipping unreadable directory: {error.filename} ({error.strerror})")

    def scan(self, root_dir: Path) -> List[CandidateFile]:
        """Returns candidates in sorted traversal order; [] if root_dir is missing.

        Symbolic links are never followed, so link cycles cannot occur.
        """
        root_dir = Path(root_dir)
        if not root_dir.is_dir():
            logger.info(f"Scan root does not exist, nothing to do: {root_dir}")
            return []

        candidates: List[CandidateFile] = []
        for root, dirs, files in os.walk(str(root_dir), onerror=self._on_walk_error, followlinks=False):
            root_path = Path(root)

            # Ensure deterministic traversal: sort directories and files
            dirs.sort()
            files.sort()

            for file_name in files:
                if not is_candidate(file_name, self.exclude):
                    continue
                file_path = root_path / file_name
                if file_path.is_symlink():
                    continue
                candidates.append(CandidateFile.from_path(file_path))

        logger.debug(f"Scan of {root_dir}: {len(candidates)} candidate(s)")
        return candidates
