import logging
import time
from pathlib import Path
from vbo.domain.errors import TranscodeError
from vbo.domain.models import CandidateFile, FileState, FormatConfig, TranscodeResult
from vbo.infrastructure.ffmpeg import FFmpegAdapter


class TranscodeWorker:
    """Re-encodes one candidate into its temp path and measures both sizes.

    Engine failures come back as a FAILED result instead of an exception; the
    original file is never touched here.
    """

    def __init__(self, ffmpeg_adapter: FFmpegAdapter):
        self.ffmpeg_adapter = ffmpeg_adapter
        self.logger = logging.getLogger(__name__)

    def transcode(self, candidate: CandidateFile, format_config: FormatConfig) -> TranscodeResult:
        result = TranscodeResult(candidate=candidate, status=FileState.TRANSCODING)
        temp_path = candidate.temp_path
        start_time = time.monotonic()

        try:
            result.original_size_bytes = candidate.path.stat().st_size
            self.ffmpeg_adapter.run(candidate.path, temp_path, format_config)
            if not temp_path.exists():
                raise TranscodeError("ffmpeg reported success but produced no output")
            result.optimized_size_bytes = temp_path.stat().st_size
        except Exception as e:
            result.status = FileState.FAILED
            result.error_message = str(e)
            _discard(temp_path)
            self.logger.error(f"Transcode failed: {candidate.path.name}: {e}")
        else:
            result.status = FileState.TRANSCODED
            self.logger.info(
                f"Transcoded: {candidate.path.name} "
                f"{result.original_size_bytes} -> {result.optimized_size_bytes} bytes"
            )
        finally:
            result.duration_seconds = time.monotonic() - start_time

        return result


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logging.getLogger(__name__).warning(f"Could not remove temp file: {path}")
