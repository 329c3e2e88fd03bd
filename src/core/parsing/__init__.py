"""Phase 2: format dispatch and record reconstruction."""

from .dispatcher import READERS, FileParser, build_job
from .reconstruction import EdgeAccumulator, extract_column_types, iter_edge_records, iter_vertex_records

__all__ = [
    "READERS",
    "EdgeAccumulator",
    "FileParser",
    "build_job",
    "extract_column_types",
    "iter_edge_records",
    "iter_vertex_records",
]
