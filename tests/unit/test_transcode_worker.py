from unittest.mock import MagicMock
from vbo.config.models import OptimizeOptions
from vbo.config.resolver import resolve_format
from vbo.domain.errors import TranscodeError
from vbo.domain.models import CandidateFile, FileState
from vbo.pipeline.transcode import TranscodeWorker


def _candidate(tmp_path, name="clip.mp4", payload=b"x" * 1000):
    path = tmp_path / name
    path.write_bytes(payload)
    return CandidateFile.from_path(path)


def test_transcode_success_measures_sizes(tmp_path):
    candidate = _candidate(tmp_path)
    config = resolve_format(".mp4", OptimizeOptions())

    adapter = MagicMock()
    adapter.run.side_effect = lambda src, dst, cfg: dst.write_bytes(b"y" * 250)

    result = TranscodeWorker(adapter).transcode(candidate, config)

    adapter.run.assert_called_once_with(candidate.path, candidate.temp_path, config)
    assert result.status == FileState.TRANSCODED
    assert result.original_size_bytes == 1000
    assert result.optimized_size_bytes == 250
    assert result.error_message is None
    assert result.duration_seconds is not None
    # Original untouched until the replace step
    assert candidate.path.read_bytes() == b"x" * 1000


def test_transcode_engine_failure_is_a_result(tmp_path):
    candidate = _candidate(tmp_path)
    config = resolve_format(".mp4", OptimizeOptions())

    def fail(src, dst, cfg):
        dst.write_bytes(b"partial")
        raise TranscodeError("ffmpeg exited with code 1: Unknown encoder 'libx264'")

    adapter = MagicMock()
    adapter.run.side_effect = fail

    result = TranscodeWorker(adapter).transcode(candidate, config)

    assert result.status == FileState.FAILED
    assert "Unknown encoder" in result.error_message
    assert result.original_size_bytes == 1000
    assert result.optimized_size_bytes is None
    assert not candidate.temp_path.exists()
    assert candidate.path.read_bytes() == b"x" * 1000


def test_transcode_missing_output(tmp_path):
    candidate = _candidate(tmp_path)
    adapter = MagicMock()

    result = TranscodeWorker(adapter).transcode(candidate, resolve_format(".mp4", OptimizeOptions()))

    assert result.status == FileState.FAILED
    assert "no output" in result.error_message


def test_transcode_unreadable_original(tmp_path):
    candidate = CandidateFile.from_path(tmp_path / "gone.mp4")
    adapter = MagicMock()

    result = TranscodeWorker(adapter).transcode(candidate, resolve_format(".mp4", OptimizeOptions()))

    assert result.status == FileState.FAILED
    assert not adapter.run.called


def test_transcode_unexpected_error_still_discards_temp(tmp_path):
    candidate = _candidate(tmp_path)

    def crash(src, dst, cfg):
        dst.write_bytes(b"complete output")
        raise UnicodeDecodeError("utf-8", b"caf\xe9", 3, 4, "invalid continuation byte")

    adapter = MagicMock()
    adapter.run.side_effect = crash

    result = TranscodeWorker(adapter).transcode(candidate, resolve_format(".mp4", OptimizeOptions()))

    assert result.status == FileState.FAILED
    assert "utf-8" in result.error_message
    assert not candidate.temp_path.exists()
    assert candidate.path.read_bytes() == b"x" * 1000
