"""Per-run mutable state handed from the counting phase to the parsing phase."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from common.models import IngestionJob
from .state_machine import JobStateMachine


@dataclass(slots=True)
class IngestState:
    """Owned by whoever holds it; the parser only touches the state it is given."""

    job: IngestionJob
    line_count: int
    lifecycle: JobStateMachine
    column_types: Optional[Dict[str, str]] = None
    records_emitted: int = 0
