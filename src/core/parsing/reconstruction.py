"""Rebuild graph records from tokenized CSV rows."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from common.models import EdgeRecord
from core.analysis import EDGE_GROUP_SIZE
from core.jobs import IngestState

log = logging.getLogger(__name__)


def extract_column_types(row: Mapping[Optional[str], Optional[str]]) -> Dict[str, str]:
    """Trim and lower-case the type tags of a vertex file's type row."""

    types: Dict[str, str] = {}
    for name, value in row.items():
        if name is None:
            # csv.DictReader parks surplus fields under None
            continue
        types[name] = (value or "").strip().lower()
    return types


def iter_vertex_records(
    rows: Iterable[Dict[str, str]], state: IngestState
) -> Iterator[Dict[str, str]]:
    """First row is the column type map, every later row is a vertex."""

    types_read = False
    for row in rows:
        if not types_read:
            state.column_types = extract_column_types(row)
            types_read = True
            log.debug("column types for %s: %s", state.job.file_path, state.column_types)
            continue
        yield row


class EdgeAccumulator:
    """Collects rows until a full source/target/edge triple is available."""

    def __init__(self) -> None:
        self._rows: List[List[str]] = []

    def __len__(self) -> int:
        return len(self._rows)

    def push(self, row: List[str]) -> Optional[EdgeRecord]:
        self._rows.append(row)
        if len(self._rows) < EDGE_GROUP_SIZE:
            return None
        source, target, edge = self._rows
        self._rows = []
        return EdgeRecord(source=source, target=target, edge=edge)


def iter_edge_records(rows: Iterable[List[str]]) -> Iterator[EdgeRecord]:
    accumulator = EdgeAccumulator()
    for row in rows:
        record = accumulator.push(row)
        if record is not None:
            yield record
    if len(accumulator):
        log.warning("dropping %d trailing row(s) that do not form an edge", len(accumulator))
