import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import List, Optional
from vbo.domain.errors import TranscodeError
from vbo.domain.models import FormatConfig

class FFmpegAdapter:
    """Wrapper around the ffmpeg binary for single-file re-encoding."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout_seconds: Optional[float] = None, debug: bool = False):
        self.ffmpeg_path = ffmpeg_path
        self.timeout_seconds = timeout_seconds
        self.debug = debug
        self.logger = logging.getLogger(__name__)

    def resolve_binary(self) -> str:
        """Returns the executable to run; raises TranscodeError if not found."""
        found = shutil.which(self.ffmpeg_path)
        if found is None:
            raise TranscodeError(f"ffmpeg binary not found: {self.ffmpeg_path}")
        return found

    def build_command(self, input_path: Path, output_path: Path, config: FormatConfig) -> List[str]:
        """Constructs the ffmpeg command line arguments."""
        cmd = [
            self.ffmpeg_path,
            "-hide_banner",
            "-nostdin",
            "-i", str(input_path),
            "-c:v", config.video_codec,
        ]
        # Audio keeps ffmpeg's default codec for the container unless muted
        if config.mute:
            cmd.append("-an")
        cmd.extend(["-f", config.container])
        cmd.extend(config.output_options)
        cmd.append(str(output_path))
        return cmd

    def run(self, input_path: Path, output_path: Path, config: FormatConfig) -> None:
        """Runs ffmpeg to completion; raises TranscodeError on any failure."""
        filename = input_path.name
        cmd = self.build_command(input_path, output_path, config)
        cmd[0] = self.resolve_binary()
        start_time = time.monotonic()

        if self.debug:
            self.logger.debug(f"FFMPEG_CMD: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                universal_newlines=True,
                errors="replace",
            )
        except OSError as e:
            raise TranscodeError(f"Failed to start ffmpeg: {e}") from e

        try:
            _, stderr = process.communicate(timeout=self.timeout_seconds)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()
            self.logger.info(f"FFMPEG_TIMEOUT: {filename} after {self.timeout_seconds}s")
            raise TranscodeError(f"ffmpeg timed out after {self.timeout_seconds}s")

        elapsed = time.monotonic() - start_time
        if process.returncode != 0:
            detail = _last_line(stderr)
            if self.debug:
                self.logger.info(f"FFMPEG_END: {filename} status=failed code={process.returncode} elapsed={elapsed:.2f}s")
            message = f"ffmpeg exited with code {process.returncode}"
            raise TranscodeError(f"{message}: {detail}" if detail else message)

        if self.debug:
            self.logger.info(f"FFMPEG_END: {filename} status=completed elapsed={elapsed:.2f}s")

def _last_line(text: Optional[str]) -> str:
    if not text:
        return ""
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    return lines[-1] if lines else ""
