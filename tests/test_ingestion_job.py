from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from common.errors import BackendError, ErrorCode
from common.models import ComponentType, EdgeRecord, GraphFormat, IngestionJob


def test_create_normalizes_arguments(tmp_path: Path) -> None:
    path = tmp_path / "edges.tsv"
    path.write_text("", encoding="utf-8")

    job = IngestionJob.create(str(path), "Edge", format="CSV", delimiter="\\t", verbose=True)

    assert job.file_path == path
    assert job.component_type is ComponentType.EDGE
    assert job.format is GraphFormat.CSV
    assert job.delimiter == "\t"
    assert job.verbose is True
    assert job.is_edge and not job.is_vertex


def test_create_defaults_delimiter_to_comma(tmp_path: Path) -> None:
    path = tmp_path / "vertices.csv"
    path.write_text("", encoding="utf-8")
    assert IngestionJob.create(path, "v").delimiter == ","


def test_missing_file_raises_before_any_io(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError) as exc:
        IngestionJob.create(tmp_path / "missing.csv", "e")
    assert exc.value.filename == str(tmp_path / "missing.csv")


def test_directory_is_not_an_input_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        IngestionJob.create(tmp_path, "v")


def test_job_is_immutable(tmp_path: Path) -> None:
    path = tmp_path / "vertices.csv"
    path.write_text("", encoding="utf-8")
    job = IngestionJob.create(path, "v")
    with pytest.raises(dataclasses.FrozenInstanceError):
        job.delimiter = ";"  # type: ignore[misc]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"component_type": "hyperedge"},
        {"component_type": "v", "format": "graphml"},
        {"component_type": "v", "delimiter": ";;"},
    ],
)
def test_invalid_arguments_raise_config_error(tmp_path: Path, kwargs: dict) -> None:
    path = tmp_path / "file.csv"
    path.write_text("", encoding="utf-8")
    kwargs = dict(kwargs)
    component_type = kwargs.pop("component_type")
    with pytest.raises(BackendError) as exc:
        IngestionJob.create(path, component_type, **kwargs)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


def test_edge_record_as_dict_keeps_positions() -> None:
    record = EdgeRecord(source=["1"], target=["2"], edge=["knows"])
    assert record.as_dict() == {"source": ["1"], "target": ["2"], "edge": ["knows"]}
