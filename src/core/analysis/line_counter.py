"""Chunked line counting with bounded memory usage."""
from __future__ import annotations

import logging
from pathlib import Path

from common.errors import MalformedInputError
from common.models import GraphFormat, IngestionJob

log = logging.getLogger(__name__)

EDGE_GROUP_SIZE = 3


class LineCounter:
    """Counts newline bytes without materializing the entire file.

    A final line with no trailing newline is not counted.
    """

    def __init__(self, *, chunk_size: int = 1_048_576) -> None:
        self.chunk_size = max(1, chunk_size)

    def count(self, path: Path) -> int:
        line_count = 0
        with path.open("rb") as handle:
            while True:
                chunk = handle.read(self.chunk_size)
                if not chunk:
                    break
                line_count += chunk.count(b"\n")
        return line_count


def validate_line_count(job: IngestionJob, line_count: int) -> None:
    """Reject edge CSVs that cannot be split into source/target/edge triples."""

    if job.format is GraphFormat.CSV and job.is_edge and line_count % EDGE_GROUP_SIZE != 0:
        log.error("edge file %s has %d lines, not a multiple of 3", job.file_path, line_count)
        raise MalformedInputError(
            "The number of lines in an edge csv must be divisible by 3, "
            "i.e. the edge file is in the wrong format.",
            context={"file_path": str(job.file_path), "line_count": line_count},
        )
