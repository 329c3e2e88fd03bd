"""Two-phase graph file parser: count lines, then stream records."""
from __future__ import annotations

import csv
import logging
from contextlib import closing
from pathlib import Path
from typing import Callable, Dict, Generator, Iterator, Optional, Union
from uuid import uuid4

from common.config import error_mode_from_policy
from common.errors import BackendError, ErrorCode, UnsupportedFormatError
from common.models import GraphFormat, GraphRecord, IngestionJob, RuntimeConfig
from common.progress import ProgressReporter, ProgressSink
from core.analysis import LineCounter, validate_line_count
from core.jobs import IngestState, JobState, JobStateMachine
from core.streaming import DEFAULT_CHUNK_SIZE, FlowController, PausableReader, open_text_stream
from .reconstruction import iter_edge_records, iter_vertex_records

log = logging.getLogger(__name__)

RecordCallback = Callable[[GraphRecord], None]
DoneCallback = Callable[[], None]
FormatReader = Callable[["FileParser", IngestState], Generator[GraphRecord, None, None]]


class FileParser:
    """Counts, validates, and streams one graph file.

    Usage::

        parser = FileParser(IngestionJob.create("edges.csv", "e"))
        state = parser.compute_lines()
        for record in parser.records(state):
            handle(record)
            parser.tick_progress()

    Consumers that fall behind call ``pause()`` and later ``resume()``
    (usually from another thread); the reader stops at the next chunk.
    """

    def __init__(
        self,
        job: IngestionJob,
        *,
        progress_sink: Optional[ProgressSink] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        line_counter: Optional[LineCounter] = None,
    ) -> None:
        self.job = job
        self.chunk_size = max(1, chunk_size)
        self.line_counter = line_counter or LineCounter(chunk_size=chunk_size)
        self.progress = ProgressReporter(progress_sink)
        self.flow = FlowController()

    @classmethod
    def from_config(
        cls,
        job: IngestionJob,
        config: RuntimeConfig,
        *,
        progress_sink: Optional[ProgressSink] = None,
    ) -> "FileParser":
        return cls(job, progress_sink=progress_sink, chunk_size=config.profile.chunk_size)

    # Phase 1 ---------------------------------------------------------

    def compute_lines(self) -> IngestState:
        lifecycle = JobStateMachine(f"{self.job.file_path.name}-{uuid4().hex[:8]}")
        lifecycle.transition(JobState.COUNTING)
        log.info("Computing line count...")
        try:
            line_count = self.line_counter.count(self.job.file_path)
            log.info("Total lines in file: %d", line_count)
            validate_line_count(self.job, line_count)
        except Exception as exc:
            lifecycle.mark_failed(f"{type(exc).__name__}: {exc}")
            raise
        lifecycle.transition(JobState.COUNTED, detail=f"lines={line_count}")
        return IngestState(job=self.job, line_count=line_count, lifecycle=lifecycle)

    # Phase 2 ---------------------------------------------------------

    def records(self, state: IngestState) -> Iterator[GraphRecord]:
        """Return a lazy, single-use iterator over the file's records.

        Format and state problems raise here, before any byte is read.
        """

        self._check_state(state)
        reader = READERS.get(self.job.format)
        if reader is None:
            state.lifecycle.mark_failed(f"unsupported format {self.job.format.value}")
            raise UnsupportedFormatError(self.job.format.value)
        state.lifecycle.transition(JobState.PARSING)
        return self._drive(reader, state)

    def parse(
        self,
        state: IngestState,
        on_record: Optional[RecordCallback] = None,
        on_done: Optional[DoneCallback] = None,
    ) -> int:
        """Callback flavour of :meth:`records`; returns the number of records."""

        for record in self.records(state):
            if on_record:
                on_record(record)
        if on_done:
            on_done()
        return state.records_emitted

    # Flow control / progress ------------------------------------------

    def pause(self) -> None:
        """Stop pulling bytes from the file at the next chunk boundary.

        Rows already decoded keep flowing. Once they run out, iterating
        `records()` blocks until `resume()` is called, so a consumer that
        pauses on its own thread must have another thread resume it.
        """

        self.flow.pause()

    def resume(self) -> None:
        self.flow.resume()

    def is_paused(self) -> bool:
        return self.flow.is_paused()

    def tick_progress(self, n: int = 1) -> None:
        self.progress.tick(n)

    def finish_progress(self) -> None:
        self.progress.finish()

    # Internal helpers -------------------------------------------------

    def _check_state(self, state: IngestState) -> None:
        if state.job != self.job:
            raise BackendError(
                ErrorCode.STATE_ERROR,
                "State was produced for a different ingestion job",
                context={"expected": str(self.job.file_path), "got": str(state.job.file_path)},
            )
        if state.lifecycle.state is not JobState.COUNTED:
            raise BackendError(
                ErrorCode.STATE_ERROR,
                f"Cannot parse from state {state.lifecycle.state.value}; run compute_lines() first",
            )

    def _drive(self, reader: FormatReader, state: IngestState) -> Iterator[GraphRecord]:
        finished = False
        try:
            with closing(reader(self, state)) as produced:
                for record in produced:
                    state.records_emitted += 1
                    yield record
            finished = True
        except Exception as exc:
            state.lifecycle.mark_failed(f"{type(exc).__name__}: {exc}")
            raise
        finally:
            if finished:
                state.lifecycle.transition(JobState.DONE, detail=f"records={state.records_emitted}")
            else:
                state.lifecycle.mark_failed("record stream closed before end of file")

    def _read_csv(self, state: IngestState) -> Generator[GraphRecord, None, None]:
        self.progress.activate(self.job, state.line_count)
        stream = PausableReader(self.job.file_path, chunk_size=self.chunk_size)
        self.flow.attach(stream)
        log.debug("opened %s (chunk_size=%d)", self.job.file_path, self.chunk_size)
        try:
            with open_text_stream(stream, encoding=self.job.encoding, errors=self.job.errors) as text:
                if self.job.is_vertex:
                    yield from iter_vertex_records(
                        csv.DictReader(text, delimiter=self.job.delimiter), state
                    )
                else:
                    yield from iter_edge_records(csv.reader(text, delimiter=self.job.delimiter))
        finally:
            self.flow.detach()
            stream.close()
            log.debug("closed %s", self.job.file_path)


READERS: Dict[GraphFormat, FormatReader] = {
    GraphFormat.CSV: FileParser._read_csv,
}


def build_job(
    file_path: Union[str, Path],
    component_type: str,
    config: RuntimeConfig,
    *,
    format: str = GraphFormat.CSV.value,
    delimiter: Optional[str] = None,
    verbose: bool = False,
) -> IngestionJob:
    """Create a job whose encoding, error mode and default delimiter come from config."""

    settings = config.global_settings
    return IngestionJob.create(
        file_path,
        component_type,
        format=format,
        delimiter=delimiter or settings.delimiter,
        verbose=verbose,
        encoding=settings.encoding,
        errors=error_mode_from_policy(settings.error_policy),
    )
