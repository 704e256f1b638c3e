import typer
from pathlib import Path
from typing import Optional, List
from pydantic import ValidationError
from vbo.config.loader import load_config
from vbo.config.models import AppConfig, OptimizeOptions, ReplaceStrategy, SchedulingMode
from vbo.domain.models import Preset
from vbo.hook import optimize_build_output
from vbo.infrastructure.logging import setup_logging

app = typer.Typer(help="VBO (Video Build Optimizer) - re-encode build videos in place")

@app.command()
def optimize(
    project_root: Path = typer.Argument(
        Path("."),
        help="Project root; video_dir and source_dir resolve against it"
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    video_dir: Optional[str] = typer.Option(None, "--video-dir", help="Directory to optimize (default: public)"),
    source_dir: Optional[str] = typer.Option(None, "--source-dir", help="Optimize this directory instead of video_dir"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-e", help="Exclude pattern (.ext or name substring); repeatable"),
    quality: Optional[float] = typer.Option(None, "--quality", "-q", help="Override CRF quality (0-63)"),
    preset: Optional[Preset] = typer.Option(None, "--preset", help="Override encoder preset"),
    mute: Optional[bool] = typer.Option(None, "--mute/--keep-audio", help="Drop or keep the audio stream"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-j", help="Files transcoded in parallel"),
    scheduling: Optional[SchedulingMode] = typer.Option(None, "--scheduling", help="groups (barrier) or pool"),
    replace_strategy: Optional[ReplaceStrategy] = typer.Option(None, "--replace", help="rename (atomic) or rewrite (legacy)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-file ffmpeg timeout in seconds"),
    log_path: Optional[Path] = typer.Option(None, "--log-path", help="Path to log file (overrides config)"),
    fail_on_error: bool = typer.Option(False, "--fail-on-error", help="Exit with code 1 if any file failed"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging"),
):
    """Optimize every video under the build output directory."""
    try:
        config = load_config(config_path) if config_path else AppConfig()

        # Apply CLI overrides
        option_updates = {}
        if exclude: option_updates["exclude"] = list(config.options.exclude) + list(exclude)
        if quality is not None: option_updates["quality"] = quality
        if preset is not None: option_updates["preset"] = preset
        if mute is not None: option_updates["mute"] = mute
        if concurrency is not None: option_updates["concurrency"] = concurrency
        if option_updates:
            merged = config.options.model_dump()
            merged.update(option_updates)
            config.options = OptimizeOptions(**merged)

        if video_dir is not None: config.video_dir = video_dir
        if source_dir is not None: config.source_dir = source_dir
        if scheduling is not None: config.scheduling = scheduling
        if replace_strategy is not None: config.replace_strategy = replace_strategy
        if timeout is not None: config.timeout_seconds = timeout
        if log_path is not None: config.log_path = str(log_path)
        if debug: config.debug = True

        logger = setup_logging(Path(config.log_path), debug=config.debug)
        logger.info(f"Config: {config.model_dump_json()}")

        summary = optimize_build_output(project_root, config=config)

    except (FileNotFoundError, ValidationError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if fail_on_error and summary.failed:
        typer.secho(f"{summary.failed} file(s) failed to optimize", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
