"""Batch scheduler for the optimization pipeline.

Drives discovery, format resolution, transcoding and replacement for every
candidate under a root directory, with at most `concurrency` files in flight.

Per-file states: DISCOVERED -> TRANSCODING -> TRANSCODED -> SWAPPING -> DONE,
or FAILED from any stage. Terminal states are never left; there are no retries.

Two scheduling modes:
- groups: candidates are partitioned into groups of `concurrency`; groups run
  in sequence and group i+1 starts only after every member of group i is
  terminal.
- pool: a thread pool of size `concurrency` is refilled as files finish.

Failures are contained at the file boundary: they are logged, published as
JobFailed and recorded in the summary, and never abort other files.
"""

import concurrent.futures
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar
from vbo.config.models import OptimizeOptions, SchedulingMode
from vbo.config.resolver import resolve_format
from vbo.domain.errors import SwapError
from vbo.domain.events import (
    DiscoveryStarted, DiscoveryFinished, GroupStarted,
    JobStarted, JobCompleted, JobFailed, ProcessingFinished,
)
from vbo.domain.models import BatchSummary, CandidateFile, FileState, FormatConfig, TranscodeResult
from vbo.infrastructure.event_bus import EventBus
from vbo.infrastructure.file_scanner import FileScanner
from vbo.infrastructure.housekeeping import HousekeepingService
from vbo.pipeline.replacer import AtomicReplacer
from vbo.pipeline.transcode import TranscodeWorker

T = TypeVar("T")


def partition(items: Sequence[T], size: int) -> List[List[T]]:
    """Splits items into consecutive groups of at most `size` (last may be smaller)."""
    if size < 1:
        raise ValueError("Group size must be >= 1")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class BatchScheduler:
    """Runs the whole pipeline for one root directory.

    Args:
        options: Frozen OptimizeOptions shared read-only by every worker thread.
        event_bus: EventBus receiving discovery, per-file and completion events.
        file_scanner: FileScanner configured with the exclude patterns.
        transcode_worker: TranscodeWorker wrapping the ffmpeg adapter.
        replacer: AtomicReplacer used after a successful transcode.
        housekeeper: Optional HousekeepingService run before discovery.
        scheduling: SchedulingMode.GROUPS (barrier) or SchedulingMode.POOL.
        format_resolver: Callable (extension, options) -> FormatConfig.
    """

    def __init__(
        self,
        options: OptimizeOptions,
        event_bus: EventBus,
        file_scanner: FileScanner,
        transcode_worker: TranscodeWorker,
        replacer: AtomicReplacer,
        housekeeper: Optional[HousekeepingService] = None,
        scheduling: SchedulingMode = SchedulingMode.GROUPS,
        format_resolver: Callable[[str, OptimizeOptions], FormatConfig] = resolve_format,
    ):
        self.options = options
        self.event_bus = event_bus
        self.file_scanner = file_scanner
        self.transcode_worker = transcode_worker
        self.replacer = replacer
        self.housekeeper = housekeeper
        self.scheduling = SchedulingMode(scheduling)
        self.format_resolver = format_resolver
        self.logger = logging.getLogger(__name__)

    def discover(self, root_dir: Path) -> List[CandidateFile]:
        self.event_bus.publish(DiscoveryStarted(directory=root_dir))
        removed = self.housekeeper.cleanup_temp_files(root_dir) if self.housekeeper else 0
        candidates = self.file_scanner.scan(root_dir)
        self.logger.info(f"Discovery finished: root={root_dir}, found={len(candidates)}, stale_temp={removed}")
        self.event_bus.publish(DiscoveryFinished(
            directory=root_dir,
            files_found=len(candidates),
            removed_temp_files=removed,
        ))
        return candidates

    def run(self, root_dir: Path) -> BatchSummary:
        root_dir = Path(root_dir)
        candidates = self.discover(root_dir)
        summary = BatchSummary()

        if candidates:
            if self.scheduling == SchedulingMode.POOL:
                summary.results = self._run_pool(candidates)
            else:
                groups = partition(candidates, self.options.concurrency)
                summary.groups = [[c.path for c in group] for group in groups]
                summary.results = self._run_groups(groups)
        else:
            self.logger.info("No files to process")

        self.logger.info(
            f"Processing finished: total={summary.total}, done={summary.succeeded}, "
            f"failed={summary.failed}, saved={summary.bytes_saved} bytes"
        )
        self.event_bus.publish(ProcessingFinished(summary=summary))
        return summary

    def _run_groups(self, groups: List[List[CandidateFile]]) -> List[TranscodeResult]:
        results: List[TranscodeResult] = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.options.concurrency) as executor:
            for index, group in enumerate(groups):
                self.logger.debug(f"Group {index + 1}/{len(groups)}: {len(group)} file(s)")
                self.event_bus.publish(GroupStarted(
                    index=index,
                    total_groups=len(groups),
                    files=[c.path for c in group],
                ))
                futures = [executor.submit(self._process_file, candidate) for candidate in group]
                # Barrier: the next group waits for every member of this one
                concurrent.futures.wait(futures, return_when=concurrent.futures.ALL_COMPLETED)
                results.extend(self._collect(futures, group))
        return results

    def _run_pool(self, candidates: List[CandidateFile]) -> List[TranscodeResult]:
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.options.concurrency) as executor:
            futures = [executor.submit(self._process_file, candidate) for candidate in candidates]
            concurrent.futures.wait(futures, return_when=concurrent.futures.ALL_COMPLETED)
            return self._collect(futures, candidates)

    def _collect(self, futures, candidates: Sequence[CandidateFile]) -> List[TranscodeResult]:
        results = []
        for future, candidate in zip(futures, candidates):
            try:
                results.append(future.result())
            except Exception as e:
                self.logger.error(f"Future failed with exception: {e}")
                results.append(TranscodeResult(candidate=candidate, status=FileState.FAILED, error_message=str(e)))
        return results

    def _process_file(self, candidate: CandidateFile) -> TranscodeResult:
        """Drives one candidate to a terminal state. Never raises."""
        filename = candidate.path.name
        result = TranscodeResult(candidate=candidate)
        self.event_bus.publish(JobStarted(candidate=candidate))

        try:
            format_config = self.format_resolver(candidate.extension, self.options)
            self.logger.debug(
                f"Resolved {filename}: codec={format_config.video_codec}, "
                f"format={format_config.container}, mute={format_config.mute}"
            )
            result = self.transcode_worker.transcode(candidate, format_config)
            if result.status == FileState.TRANSCODED:
                result.status = FileState.SWAPPING
                self.replacer.replace(candidate, candidate.temp_path)
                result.status = FileState.DONE
        except SwapError as e:
            result.status = FileState.FAILED
            result.error_message = str(e)
            self.logger.error(f"Replace failed: {filename}: {e}")
        except Exception as e:
            result.status = FileState.FAILED
            result.error_message = str(e) or type(e).__name__
            self.logger.exception(f"Unexpected error while processing {filename}")

        if result.status == FileState.DONE:
            reduction = result.reduction_percent
            self.logger.info(
                f"Optimized: {filename} {result.original_size_bytes} -> "
                f"{result.optimized_size_bytes} bytes"
                + (f" ({reduction:.1f}%)" if reduction is not None else "")
            )
            self.event_bus.publish(JobCompleted(result=result))
        else:
            if result.status != FileState.FAILED:
                result.status = FileState.FAILED
            self.event_bus.publish(JobFailed(result=result))
        return result
