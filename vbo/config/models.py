import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from vbo.domain.models import Preset, VideoExtension

DEFAULT_QUALITY = 18
DEFAULT_PRESET = Preset.MEDIUM
DEFAULT_MUTE = False
DEFAULT_CONCURRENCY = 4
DEFAULT_LOG_PATH = str(Path(tempfile.gettempdir()) / "vbo" / "optimize.log")

class ReplaceStrategy(str, Enum):
    RENAME = "rename"    # single os.replace over the original
    REWRITE = "rewrite"  # legacy delete + write + delete

class SchedulingMode(str, Enum):
    GROUPS = "groups"  # barrier between fixed-size groups
    POOL = "pool"      # continuously refilled pool of the same size

class FormatOverride(BaseModel):
    """Per-extension overrides; unset fields fall through to the global value."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    quality: Optional[float] = Field(default=None, ge=0, le=63)
    preset: Optional[Preset] = None
    mute: Optional[bool] = None

class OptimizeOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    exclude: List[str] = Field(default_factory=list)
    quality: float = Field(default=DEFAULT_QUALITY, ge=0, le=63)
    preset: Preset = DEFAULT_PRESET
    mute: bool = DEFAULT_MUTE
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    overrides: Dict[VideoExtension, FormatOverride] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def collect_extension_keys(cls, data: Any) -> Any:
        """Folds ".mp4"-style top-level keys into the typed overrides table."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw_overrides = dict(data.pop("overrides", None) or {})
        for key in [k for k in data if isinstance(k, str) and k.startswith(".")]:
            raw_overrides[key] = data.pop(key)

        overrides: Dict[VideoExtension, Any] = {}
        for key, value in raw_overrides.items():
            ext = key if isinstance(key, VideoExtension) else VideoExtension.parse(str(key))
            if ext is None:
                raise ValueError(f"Unsupported override extension: {key}")
            if value is not None:
                overrides[ext] = value
        data["overrides"] = overrides
        return data

    @field_validator("exclude")
    @classmethod
    def validate_exclude(cls, v: List[str]) -> List[str]:
        for pattern in v:
            if not pattern:
                raise ValueError("Exclude patterns must be non-empty strings")
        return v

    def override_for(self, extension: str) -> Optional[FormatOverride]:
        ext = VideoExtension.parse(extension)
        if ext is None:
            return None
        return self.overrides.get(ext)

class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    options: OptimizeOptions = Field(default_factory=OptimizeOptions)
    video_dir: str = "public"
    source_dir: Optional[str] = None
    replace_strategy: ReplaceStrategy = ReplaceStrategy.RENAME
    scheduling: SchedulingMode = SchedulingMode.GROUPS
    timeout_seconds: Optional[float] = Field(default=None, gt=0)
    ffmpeg_path: str = "ffmpeg"
    debug: bool = False
    log_path: str = DEFAULT_LOG_PATH
