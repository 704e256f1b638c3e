from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, computed_field

class VideoExtension(str, Enum):
    MP4 = ".mp4"
    WEBM = ".webm"
    MOV = ".mov"
    AVI = ".avi"

    @classmethod
    def parse(cls, value: str) -> Optional["VideoExtension"]:
        """Case-insensitive lookup; returns None for unsupported extensions."""
        try:
            return cls(value.lower())
        except ValueError:
            return None

SUPPORTED_EXTENSIONS = frozenset(ext.value for ext in VideoExtension)

class Preset(str, Enum):
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"

class FileState(str, Enum):
    DISCOVERED = "DISCOVERED"
    TRANSCODING = "TRANSCODING"
    TRANSCODED = "TRANSCODED"
    SWAPPING = "SWAPPING"
    DONE = "DONE"
    FAILED = "FAILED"

TERMINAL_STATES = frozenset({FileState.DONE, FileState.FAILED})

class CandidateFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path
    extension: str

    @classmethod
    def from_path(cls, path: Path) -> "CandidateFile":
        return cls(path=Path(path).absolute(), extension=Path(path).suffix.lower())

    @property
    def temp_path(self) -> Path:
        # <name>.<ext>.tmp.<ext>: same directory, unique per candidate
        return self.path.with_name(f"{self.path.name}.tmp{self.extension}")

class FormatConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    container: str
    video_codec: str
    output_options: Tuple[str, ...]
    mute: bool = False

class TranscodeResult(BaseModel):
    candidate: CandidateFile
    status: FileState = FileState.DISCOVERED
    original_size_bytes: Optional[int] = None
    optimized_size_bytes: Optional[int] = None
    error_message: Optional[str] = None
    duration_seconds: Optional[float] = None

    @property
    def succeeded(self) -> bool:
        return self.status == FileState.DONE

    @property
    def reduction_percent(self) -> Optional[float]:
        if not self.original_size_bytes or self.optimized_size_bytes is None:
            return None
        return (1 - self.optimized_size_bytes / self.original_size_bytes) * 100.0

class BatchSummary(BaseModel):
    results: List[TranscodeResult] = Field(default_factory=list)
    groups: List[List[Path]] = Field(default_factory=list)

    @computed_field
    @property
    def total(self) -> int:
        return len(self.results)

    @computed_field
    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @computed_field
    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == FileState.FAILED)

    @property
    def bytes_saved(self) -> int:
        return sum(
            r.original_size_bytes - r.optimized_size_bytes
            for r in self.results
            if r.succeeded and r.original_size_bytes is not None and r.optimized_size_bytes is not None
        )
