import io
import threading
import time
import pytest
import yaml
from rich.console import Console
from vbo.config.models import AppConfig, OptimizeOptions
from vbo.domain.models import CandidateFile, FileState, TranscodeResult
from vbo.infrastructure.event_bus import EventBus

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_options():
    """Returns OptimizeOptions with one per-extension override."""
    return OptimizeOptions(
        exclude=[".avi", "intro"],
        quality=20,
        preset="medium",
        mute=False,
        concurrency=2,
        **{".mp4": {"quality": 18}},
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "vbo.yaml"

    content = {
        'video_dir': 'dist/media',
        'replace_strategy': 'rewrite',
        'timeout_seconds': 120,
        'options': {
            'exclude': ['.mov', 'poster'],
            'quality': 24,
            'preset': 'slow',
            'concurrency': 3,
            '.webm': {'preset': 'fast', 'mute': True},
        },
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

@pytest.fixture
def app_config():
    return AppConfig()

# ============================================================================
# EventBus / Console Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

@pytest.fixture
def console_buffer():
    """Returns (console, buffer) with a wide, non-terminal rich Console."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, force_terminal=False, color_system=None)
    return console, buffer

# ============================================================================
# File System Fixtures
# ============================================================================

@pytest.fixture
def build_dir(tmp_path):
    """Creates a build output tree with videos and non-videos at several depths."""
    root = tmp_path / "out"
    (root / "sub" / "deeper").mkdir(parents=True)
    files = {
        "a.mp4": root / "a.mp4",
        "b.webm": root / "b.webm",
        "c.gif": root / "sub" / "c.gif",
        "d.MOV": root / "sub" / "d.MOV",
        "e.avi": root / "sub" / "deeper" / "e.avi",
        "index.html": root / "index.html",
    }
    for path in files.values():
        path.write_bytes(b"original video payload " * 50)
    return root, files

# ============================================================================
# Fake transcode worker
# ============================================================================

class FakeTranscodeWorker:
    """Stands in for TranscodeWorker; records start/end order across threads."""

    def __init__(self, fail_names=(), delay=0.0, output=b"small"):
        self.fail_names = set(fail_names)
        self.delay = delay
        self.output = output
        self.events = []
        self.active = 0
        self.max_active = 0
        self.configs = {}
        self._lock = threading.Lock()

    def transcode(self, candidate: CandidateFile, format_config) -> TranscodeResult:
        name = candidate.path.name
        with self._lock:
            self.events.append(("start", name))
            self.configs[name] = format_config
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            original_size = candidate.path.stat().st_size
            if name in self.fail_names:
                return TranscodeResult(
                    candidate=candidate,
                    status=FileState.FAILED,
                    original_size_bytes=original_size,
                    error_message=f"ffmpeg exited with code 1: {name} is corrupt",
                )
            candidate.temp_path.write_bytes(self.output)
            return TranscodeResult(
                candidate=candidate,
                status=FileState.TRANSCODED,
                original_size_bytes=original_size,
                optimized_size_bytes=len(self.output),
            )
        finally:
            with self._lock:
                self.active -= 1
                self.events.append(("end", name))

@pytest.fixture
def fake_worker():
    return FakeTranscodeWorker()

# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (integration tests running ffmpeg)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )

@pytest.fixture
def worker_factory():
    """Returns the FakeTranscodeWorker class for tests needing custom failures."""
    return FakeTranscodeWorker
