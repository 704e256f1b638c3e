"""Entry point for host build tools.

A host calls `optimize_build_output` once, after its artifacts are final. All
state travels in the AppConfig passed in; nothing is remembered between calls.
Per-file failures are reported, never raised.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union
from rich.console import Console
from vbo.config.models import AppConfig, OptimizeOptions, ReplaceStrategy
from vbo.domain.models import BatchSummary
from vbo.infrastructure.event_bus import EventBus
from vbo.infrastructure.ffmpeg import FFmpegAdapter
from vbo.infrastructure.file_scanner import FileScanner
from vbo.infrastructure.housekeeping import HousekeepingService
from vbo.pipeline.replacer import AtomicReplacer
from vbo.pipeline.scheduler import BatchScheduler
from vbo.pipeline.transcode import TranscodeWorker
from vbo.ui.reporter import ConsoleReporter

logger = logging.getLogger(__name__)


def resolve_video_dir(project_root: Path, config: AppConfig) -> Path:
    """source_dir wins over video_dir; relative paths resolve against project_root."""
    target = Path(config.source_dir if config.source_dir else config.video_dir)
    if target.is_absolute():
        return target
    return (Path(project_root) / target).resolve()


def build_scheduler(config: AppConfig, event_bus: EventBus) -> BatchScheduler:
    """Wires the pipeline components from one AppConfig."""
    ffmpeg = FFmpegAdapter(
        ffmpeg_path=config.ffmpeg_path,
        timeout_seconds=config.timeout_seconds,
        debug=config.debug,
    )
    return BatchScheduler(
        options=config.options,
        event_bus=event_bus,
        file_scanner=FileScanner(exclude=config.options.exclude),
        transcode_worker=TranscodeWorker(ffmpeg),
        replacer=AtomicReplacer(config.replace_strategy),
        housekeeper=HousekeepingService(
            restore_orphans=config.replace_strategy == ReplaceStrategy.REWRITE,
        ),
        scheduling=config.scheduling,
    )


def optimize_build_output(
    project_root: Union[str, Path],
    options: Optional[Union[OptimizeOptions, Dict[str, Any]]] = None,
    config: Optional[AppConfig] = None,
    console: Optional[Console] = None,
    event_bus: Optional[EventBus] = None,
) -> BatchSummary:
    """Optimizes every video under the configured directory of a build.

    Args:
        project_root: Root the relative video_dir/source_dir resolve against.
        options: OptimizeOptions or a plugin-style dict (`".mp4": {...}` keys allowed).
        config: Full AppConfig; `options`, when given, replaces its options.
        console: rich Console for progress lines (a default one otherwise).
        event_bus: Bus to publish on; extra subscribers may already be attached.
    """
    config = config or AppConfig()
    if options is not None:
        if not isinstance(options, OptimizeOptions):
            options = OptimizeOptions(**options)
        config = config.model_copy(update={"options": options})

    video_dir = resolve_video_dir(Path(project_root), config)
    bus = event_bus or EventBus()
    ConsoleReporter(bus, console=console)

    logger.info(
        f"VBO started: dir={video_dir}, concurrency={config.options.concurrency}, "
        f"quality={config.options.quality}, preset={config.options.preset.value}, "
        f"strategy={config.replace_strategy.value}, scheduling={config.scheduling.value}"
    )
    return build_scheduler(config, bus).run(video_dir)
