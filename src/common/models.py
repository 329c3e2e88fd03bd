"""Data models shared across the CLI, core pipeline, and progress sinks."""
from __future__ import annotations

import errno
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import BackendError, ErrorCode

DEFAULT_DELIMITER = ","
_DELIMITER_ALIASES = {"\\t": "\t", "tab": "\t"}


class ComponentType(str, Enum):
    """Which half of a graph a file describes."""

    VERTEX = "v"
    EDGE = "e"

    @classmethod
    def parse(cls, value: Union[str, "ComponentType"]) -> "ComponentType":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        aliases = {"v": cls.VERTEX, "vertex": cls.VERTEX, "e": cls.EDGE, "edge": cls.EDGE}
        try:
            return aliases[text]
        except KeyError as exc:
            raise BackendError(
                ErrorCode.CONFIG_ERROR,
                f"Unknown component type '{value}'. Expected one of: v, vertex, e, edge",
            ) from exc


class GraphFormat(str, Enum):
    """Closed set of input formats known to the dispatcher."""

    CSV = "csv"
    XLSX = "xlsx"
    GEXF = "gexf"
    DOT = "dot"

    @classmethod
    def parse(cls, value: Union[str, "GraphFormat"]) -> "GraphFormat":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        allowed = ", ".join(member.value for member in cls)
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Unknown format '{value}'. Allowed: {allowed}",
        )


@dataclass(frozen=True, slots=True)
class IngestionJob:
    """Immutable description of one ingestion run."""

    file_path: Path
    component_type: ComponentType
    format: GraphFormat = GraphFormat.CSV
    delimiter: str = DEFAULT_DELIMITER
    verbose: bool = False
    encoding: str = "utf-8"
    errors: str = "strict"

    @classmethod
    def create(
        cls,
        file_path: Union[str, Path],
        component_type: Union[str, ComponentType],
        *,
        format: Union[str, GraphFormat] = GraphFormat.CSV,
        delimiter: Optional[str] = None,
        verbose: bool = False,
        encoding: str = "utf-8",
        errors: str = "strict",
    ) -> "IngestionJob":
        """Normalize raw arguments and make sure the input file exists."""

        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(errno.ENOENT, "provided file not found", str(path))
        return cls(
            file_path=path,
            component_type=ComponentType.parse(component_type),
            format=GraphFormat.parse(format),
            delimiter=normalize_delimiter(delimiter),
            verbose=verbose,
            encoding=encoding,
            errors=errors,
        )

    @property
    def is_vertex(self) -> bool:
        return self.component_type is ComponentType.VERTEX

    @property
    def is_edge(self) -> bool:
        return self.component_type is ComponentType.EDGE


def normalize_delimiter(value: Optional[str]) -> str:
    if value is None or value == "":
        return DEFAULT_DELIMITER
    value = _DELIMITER_ALIASES.get(value, value)
    if len(value) != 1:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Delimiter must be a single character, got {value!r}",
        )
    return value


@dataclass(frozen=True, slots=True)
class EdgeRecord:
    """One edge rebuilt from three consecutive raw rows."""

    source: List[str]
    target: List[str]
    edge: List[str]

    def as_dict(self) -> Dict[str, List[str]]:
        return {"source": self.source, "target": self.target, "edge": self.edge}


GraphRecord = Union[Dict[str, str], EdgeRecord]


@dataclass(slots=True)
class IngestProgress:
    """Progress payload written by progress sinks."""

    file_path: Path
    processed_records: int
    total_records: Optional[int]
    current_phase: str
    records_per_second: Optional[float] = None
    eta_seconds: Optional[float] = None


@dataclass(slots=True)
class GlobalSettings:
    """Global knobs that apply across profiles."""

    encoding: str = "utf-8"
    error_policy: str = "fail-fast"  # fail-fast | replace
    delimiter: str = DEFAULT_DELIMITER


@dataclass(slots=True)
class ProfileSettings:
    """Profile-specific streaming knobs."""

    description: str
    chunk_size: int = 65_536
    progress_granularity: int = 1_000


@dataclass(slots=True)
class RuntimeConfig:
    """Resolved configuration for a single run."""

    global_settings: GlobalSettings = field(default_factory=GlobalSettings)
    profile: ProfileSettings = field(default_factory=lambda: ProfileSettings(description="built-in"))
