import threading
from typing import Optional
from rich.console import Console
from rich.text import Text
from vbo.infrastructure.event_bus import EventBus
from vbo.domain.events import (
    DiscoveryFinished, JobStarted, JobCompleted, JobFailed, ProcessingFinished,
)

def format_mb(size_bytes: Optional[int]) -> str:
    """Format size in megabytes with two decimals: 12.34 MB."""
    if size_bytes is None:
        return "-"
    return f"{size_bytes / 1024 / 1024:.2f} MB"

class ConsoleReporter:
    """Subscribes to EventBus and prints one progress line per event.

    Events arrive from worker threads; the lock keeps lines whole, not ordered.
    """

    def __init__(self, bus: EventBus, console: Optional[Console] = None):
        self.bus = bus
        self.console = console or Console()
        self._lock = threading.Lock()
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(DiscoveryFinished, self.on_discovery_finished)
        self.bus.subscribe(JobStarted, self.on_job_started)
        self.bus.subscribe(JobCompleted, self.on_job_completed)
        self.bus.subscribe(JobFailed, self.on_job_failed)
        self.bus.subscribe(ProcessingFinished, self.on_processing_finished)

    def _print(self, text: Text):
        with self._lock:
            self.console.print(text)

    def on_discovery_finished(self, event: DiscoveryFinished):
        if event.files_found == 0:
            return
        self._print(Text(f"🎬 Found {event.files_found} video file(s) to optimize", style="bold"))

    def on_job_started(self, event: JobStarted):
        self._print(Text(f"⚡ Optimizing: {event.candidate.path.name}", style="cyan"))

    def on_job_completed(self, event: JobCompleted):
        result = event.result
        reduction = result.reduction_percent
        reduction_text = f" ({reduction:.1f}% smaller)" if reduction is not None else ""
        line = Text(f"✅ {result.candidate.path.name}: ", style="green")
        line.append(f"{format_mb(result.original_size_bytes)} → {format_mb(result.optimized_size_bytes)}{reduction_text}")
        self._print(line)

    def on_job_failed(self, event: JobFailed):
        result = event.result
        self._print(Text(
            f"❌ Error optimizing {result.candidate.path.name}: {result.error_message or 'unknown error'}",
            style="bold red",
        ))

    def on_processing_finished(self, event: ProcessingFinished):
        summary = event.summary
        if summary.total == 0:
            return
        line = Text("🎉 Video optimization complete!", style="bold green")
        line.append(
            f" {summary.succeeded}/{summary.total} optimized, {summary.failed} failed, "
            f"{format_mb(summary.bytes_saved)} saved",
            style="default",
        )
        self._print(line)
