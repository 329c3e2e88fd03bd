from __future__ import annotations

import pytest

from common.errors import ErrorCode, MalformedInputError
from common.models import IngestionJob
from core.analysis.line_counter import LineCounter, validate_line_count


def test_line_counter_counts_newline_bytes(tmp_path):
    path = tmp_path / "sample.csv"
    path.write_text("alpha\nbravo\ncharlie\n", encoding="utf-8")
    assert LineCounter().count(path) == 3


def test_line_counter_ignores_unterminated_last_line(tmp_path):
    path = tmp_path / "sample.csv"
    path.write_text("alpha\nbravo\ncharlie", encoding="utf-8")
    assert LineCounter().count(path) == 2


def test_line_counter_spans_chunk_boundaries(tmp_path):
    path = tmp_path / "large.csv"
    line = "x" * 700 + "\n"
    path.write_text(line * 50, encoding="utf-8")
    counter = LineCounter(chunk_size=64)
    assert counter.chunk_size == 64
    assert counter.count(path) == 50


def test_line_counter_clamps_chunk_size_like_the_parser(tmp_path):
    path = tmp_path / "tiny.csv"
    path.write_text("a\nb\nc\n", encoding="utf-8")
    counter = LineCounter(chunk_size=0)
    assert counter.chunk_size == 1
    assert counter.count(path) == 3


def test_line_counter_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_bytes(b"")
    assert LineCounter().count(path) == 0


def test_validate_line_count_rejects_partial_edge_triples(tmp_path):
    path = tmp_path / "edges.csv"
    path.write_text("a\n" * 8, encoding="utf-8")
    job = IngestionJob.create(path, "e")
    with pytest.raises(MalformedInputError) as exc:
        validate_line_count(job, 8)
    assert exc.value.code == ErrorCode.MALFORMED_INPUT
    assert exc.value.context["line_count"] == 8


def test_validate_line_count_accepts_any_vertex_count(tmp_path):
    path = tmp_path / "vertices.csv"
    path.write_text("a\n" * 8, encoding="utf-8")
    validate_line_count(IngestionJob.create(path, "v"), 8)


def test_validate_line_count_only_applies_to_csv(tmp_path):
    path = tmp_path / "edges.gexf"
    path.write_text("<gexf/>\n", encoding="utf-8")
    validate_line_count(IngestionJob.create(path, "e", format="gexf"), 1)
