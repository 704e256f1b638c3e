"""Domain events for the optimization pipeline.

Events flow through the EventBus, decoupling the batch scheduler from console
reporting. See `infrastructure/event_bus.py` for the pub/sub mechanism.
"""

from typing import List
from pathlib import Path
from pydantic import BaseModel
from .models import BatchSummary, CandidateFile, TranscodeResult


class Event(BaseModel):
    """Base class for all domain events."""

    pass


class DiscoveryStarted(Event):
    """Emitted when the directory walk begins."""

    directory: Path


class DiscoveryFinished(Event):
    """Emitted once the candidate list is known."""

    directory: Path
    files_found: int
    removed_temp_files: int = 0


class GroupStarted(Event):
    """Emitted before a group of at most `concurrency` files is driven."""

    index: int
    total_groups: int
    files: List[Path]


class JobStarted(Event):
    """Emitted when a file enters TRANSCODING."""

    candidate: CandidateFile


class JobEvent(Event):
    """Base class for terminal per-file events."""

    result: TranscodeResult


class JobCompleted(JobEvent):
    """Emitted when a file reaches DONE."""

    pass


class JobFailed(JobEvent):
    """Emitted when a file reaches FAILED."""

    pass


class ProcessingFinished(Event):
    """Emitted after every candidate is terminal, regardless of failures."""

    summary: BatchSummary
