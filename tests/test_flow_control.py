from __future__ import annotations

import threading
import time
from pathlib import Path

from common.models import IngestionJob
from core.parsing import FileParser
from core.streaming import FlowController, PausableReader, open_text_stream


def _write_edges(path: Path, triples: int) -> None:
    lines = []
    for idx in range(triples):
        lines.extend([f"s{idx},src", f"t{idx},trg", f"e{idx},rel"])
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_controller_without_stream_is_noop() -> None:
    controller = FlowController()
    controller.pause()
    assert controller.is_paused() is False
    controller.resume()
    assert controller.is_paused() is False


def test_pause_and_resume_toggle_attached_stream(tmp_path: Path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("a,b\n", encoding="utf-8")
    controller = FlowController()
    reader = PausableReader(path, chunk_size=4)
    try:
        controller.attach(reader)
        controller.pause()
        assert controller.is_paused() is True
        controller.resume()
        assert controller.is_paused() is False
        controller.detach()
        assert controller.is_paused() is False
    finally:
        reader.close()


def test_reader_respects_chunk_size(tmp_path: Path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("abcdefghij\n", encoding="utf-8")
    reader = PausableReader(path, chunk_size=4)
    with open_text_stream(reader, encoding="utf-8", errors="strict") as text:
        assert text.read() == "abcdefghij\n"
    assert reader.chunks_read == 3
    assert reader.closed


def test_parser_flow_control_is_noop_outside_parse(tmp_path: Path) -> None:
    path = tmp_path / "edges.csv"
    _write_edges(path, 1)
    parser = FileParser(IngestionJob.create(path, "e"))
    parser.pause()
    assert parser.is_paused() is False
    parser.resume()
    assert parser.is_paused() is False


def test_paused_stream_blocks_until_resumed(tmp_path: Path) -> None:
    path = tmp_path / "edges.csv"
    _write_edges(path, 20)
    parser = FileParser(IngestionJob.create(path, "e"), chunk_size=16)
    state = parser.compute_lines()
    records = parser.records(state)

    first = next(records)
    assert first.source == ["s0", "src"]

    parser.pause()
    assert parser.is_paused() is True
    resumed = threading.Event()

    def resume_later() -> None:
        resumed.set()
        parser.resume()

    timer = threading.Timer(0.2, resume_later)
    started = time.perf_counter()
    timer.start()
    try:
        rest = list(records)
    finally:
        timer.cancel()
    elapsed = time.perf_counter() - started

    assert resumed.is_set()
    assert elapsed >= 0.1
    assert [record.edge[0] for record in rest] == [f"e{idx}" for idx in range(1, 20)]
    assert parser.is_paused() is False
