"""Per-container codec parameter resolution.

Maps a file extension plus the run's OptimizeOptions to the FormatConfig handed
to ffmpeg. Pure: no I/O, never raises.

Precedence for quality, preset and mute is per-extension override, then the
global option, then the built-in default (18, medium, no mute).
"""

from typing import List, NamedTuple
from vbo.config.models import DEFAULT_MUTE, DEFAULT_PRESET, DEFAULT_QUALITY, OptimizeOptions
from vbo.domain.models import FormatConfig, Preset

# libvpx-vp9 -cpu-used per preset; unknown presets fall back to the fast value
VP9_CPU_USED = {
    Preset.SLOW: "0",
    Preset.MEDIUM: "2",
    Preset.FAST: "4",
}


class EncodingSettings(NamedTuple):
    quality: float
    preset: Preset
    mute: bool


def _first_set(*values):
    for value in values:
        if value is not None:
            return value
    return None


def resolve_encoding(extension: str, options: OptimizeOptions) -> EncodingSettings:
    override = options.override_for(extension)
    quality = _first_set(override.quality if override else None, options.quality, DEFAULT_QUALITY)
    preset = _first_set(override.preset if override else None, options.preset, DEFAULT_PRESET)
    mute = _first_set(override.mute if override else None, options.mute, DEFAULT_MUTE)
    return EncodingSettings(quality=quality, preset=Preset(preset), mute=bool(mute))


def format_quality(quality: float) -> str:
    """Renders CRF without a trailing '.0' for integral values."""
    if float(quality).is_integer():
        return str(int(quality))
    return str(quality)


def _x264_options(settings: EncodingSettings) -> List[str]:
    return [
        "-crf", format_quality(settings.quality),
        "-preset", settings.preset.value,
    ]


def resolve_format(extension: str, options: OptimizeOptions) -> FormatConfig:
    """Builds the codec descriptor for one container."""
    settings = resolve_encoding(extension, options)
    ext = extension.lower()

    if ext == ".mp4":
        flags = _x264_options(settings) + [
            "-profile:v", "high",
            "-level", "4.0",
            "-pix_fmt", "yuv420p",
            "-movflags", "+faststart",
            "-y",
        ]
        return FormatConfig(container="mp4", video_codec="libx264", output_options=tuple(flags), mute=settings.mute)

    if ext == ".webm":
        cpu_used = VP9_CPU_USED.get(settings.preset, VP9_CPU_USED[Preset.FAST])
        flags = [
            "-crf", format_quality(settings.quality),
            "-b:v", "0",
            "-pix_fmt", "yuv420p",
            "-cpu-used", cpu_used,
            "-y",
        ]
        return FormatConfig(container="webm", video_codec="libvpx-vp9", output_options=tuple(flags), mute=settings.mute)

    flags = _x264_options(settings) + ["-pix_fmt", "yuv420p", "-y"]
    if ext == ".mov":
        return FormatConfig(container="mov", video_codec="libx264", output_options=tuple(flags), mute=settings.mute)

    # .avi and anything that slipped past the scanner
    return FormatConfig(container="avi", video_codec="libx264", output_options=tuple(flags), mute=settings.mute)
