"""Progress reporting: total derivation, tick forwarding, and pluggable sinks."""
from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence

from .models import GraphFormat, IngestionJob, IngestProgress


class ProgressSink(Protocol):
    """Anything that can render or record progress."""

    def set_total(self, total: Optional[int]) -> None: ...

    def tick(self, n: int = 1) -> None: ...

    def finish(self) -> None: ...


def progress_total(job: IngestionJob, line_count: int) -> Optional[int]:
    """Expected number of records, or None when the format gives no estimate."""

    if job.format is not GraphFormat.CSV:
        return None
    if job.is_edge:
        return line_count // 3
    return line_count


class ProgressReporter:
    """Activates a sink with a computed total and forwards ticks to it.

    Ticks before activation are ignored, so consumers can tick
    unconditionally.
    """

    def __init__(self, sink: Optional[ProgressSink] = None) -> None:
        self.sink = sink
        self.total: Optional[int] = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def activate(self, job: IngestionJob, line_count: int) -> Optional[int]:
        self.total = progress_total(job, line_count)
        self._active = True
        if self.sink is not None:
            self.sink.set_total(self.total)
        return self.total

    def tick(self, n: int = 1) -> None:
        if not self._active or self.sink is None:
            return
        self.sink.tick(n)

    def finish(self) -> None:
        """Flush the final snapshot once the consumer has processed its last record."""

        if not self._active:
            return
        self._active = False
        if self.sink is not None:
            self.sink.finish()


class CountingSink(ABC):
    """Base sink that tracks processed records and emits every `granularity` ticks.

    Subclasses only decide where a snapshot goes.
    """

    phase = "parse"

    def __init__(self, file_path: Path, *, granularity: int = 1_000) -> None:
        self.file_path = file_path
        self.granularity = max(1, granularity)
        self.total: Optional[int] = None
        self.processed = 0
        self._next_emit = self.granularity
        self._last_emitted: Optional[int] = None
        self._start_time = time.perf_counter()

    def set_total(self, total: Optional[int]) -> None:
        self.total = total
        self.processed = 0
        self._next_emit = self.granularity
        self._last_emitted = None
        self._start_time = time.perf_counter()

    def tick(self, n: int = 1) -> None:
        self.processed += n
        finished = self.total is not None and self.processed >= self.total
        if self.processed >= self._next_emit or finished:
            self._emit_snapshot()
            self._next_emit = self.processed + self.granularity

    def finish(self) -> None:
        if self._last_emitted != self.processed:
            self._emit_snapshot()

    def _emit_snapshot(self) -> None:
        self._last_emitted = self.processed
        self.emit(self.snapshot())

    def snapshot(self) -> IngestProgress:
        rate = None
        eta = None
        elapsed = time.perf_counter() - self._start_time
        if self.processed > 0 and elapsed > 0:
            rate = self.processed / elapsed
            if self.total:
                eta = max(self.total - self.processed, 0) / rate
        return IngestProgress(
            file_path=self.file_path,
            processed_records=self.processed,
            total_records=self.total,
            current_phase=self.phase,
            records_per_second=rate,
            eta_seconds=eta,
        )

    @abstractmethod
    def emit(self, progress: IngestProgress) -> None:
        raise NotImplementedError


class ConsoleProgressSink(CountingSink):
    """Prints `[ingest/progress]` lines through a writer (print by default)."""

    def __init__(
        self,
        file_path: Path,
        *,
        granularity: int = 1_000,
        writer: Callable[[str], None] = print,
    ) -> None:
        super().__init__(file_path, granularity=granularity)
        self.writer = writer

    def emit(self, progress: IngestProgress) -> None:
        self.writer(render_progress(progress))


class JsonlProgressSink(CountingSink):
    """Appends progress snapshots to a JSONL file."""

    def __init__(self, path: Path, file_path: Path, *, granularity: int = 1_000) -> None:
        super().__init__(file_path, granularity=granularity)
        self.logger = ProgressLogger(path)

    def emit(self, progress: IngestProgress) -> None:
        self.logger.emit(progress)


class FanOutSink:
    """Forwards to several sinks in order."""

    def __init__(self, sinks: Sequence[ProgressSink]) -> None:
        self.sinks = list(sinks)

    def set_total(self, total: Optional[int]) -> None:
        for sink in self.sinks:
            sink.set_total(total)

    def tick(self, n: int = 1) -> None:
        for sink in self.sinks:
            sink.tick(n)

    def finish(self) -> None:
        for sink in self.sinks:
            sink.finish()


class ProgressLogger:
    """Writes progress events to JSONL for later inspection."""

    def __init__(self, path: Optional[Path]) -> None:
        self.path = path
        if path:
            path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, progress: IngestProgress) -> None:
        if not self.path:
            return
        payload = asdict(progress)
        payload["file_path"] = str(progress.file_path)
        payload["timestamp"] = time.time()
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload))
            handle.write("\n")


def render_progress(progress: IngestProgress) -> str:
    total = progress.total_records if progress.total_records is not None else "?"
    eta = f" eta={progress.eta_seconds:.1f}s" if progress.eta_seconds is not None else ""
    return (
        f"[ingest/progress] {progress.file_path.name} "
        f"records={progress.processed_records}/{total}{eta}"
    )
