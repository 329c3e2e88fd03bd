"""State machine tracking the count → parse lifecycle of an ingestion run."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

log = logging.getLogger(__name__)


class JobState(str, Enum):
    """Supported lifecycle states for an ingestion run."""

    PENDING = "PENDING"
    COUNTING = "COUNTING"
    COUNTED = "COUNTED"
    PARSING = "PARSING"
    DONE = "DONE"
    FAILED = "FAILED"


_TERMINAL_STATES = {JobState.DONE, JobState.FAILED}
_STATE_ORDER: Dict[JobState, int] = {
    JobState.PENDING: 0,
    JobState.COUNTING: 1,
    JobState.COUNTED: 2,
    JobState.PARSING: 3,
    JobState.DONE: 4,
}


@dataclass(frozen=True, slots=True)
class JobEvent:
    state: JobState
    detail: Optional[str]
    timestamp: float


class JobStateMachine:
    """Thread-safe helper that enforces forward-only transitions and keeps history."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        self._state = JobState.PENDING
        self._lock = threading.Lock()
        self.history: List[JobEvent] = []
        self._record(JobState.PENDING, detail="job registered")

    @property
    def state(self) -> JobState:
        return self._state

    def transition(self, target: JobState, *, detail: str | None = None) -> None:
        with self._lock:
            if target == self._state:
                return
            if not self._can_transition(target):
                raise ValueError(f"Invalid transition {self._state.value} -> {target.value}")
            self._state = target
            self._record(target, detail=detail)

    def mark_failed(self, detail: str | None = None) -> None:
        with self._lock:
            if self._state in _TERMINAL_STATES:
                return
            self._state = JobState.FAILED
            self._record(JobState.FAILED, detail=detail)

    def _can_transition(self, target: JobState) -> bool:
        if self._state in _TERMINAL_STATES:
            return False
        if target == JobState.FAILED:
            return True
        current_rank = _STATE_ORDER.get(self._state, -1)
        target_rank = _STATE_ORDER.get(target, -1)
        return target_rank > current_rank

    def _record(self, state: JobState, detail: str | None) -> None:
        self.history.append(JobEvent(state=state, detail=detail, timestamp=time.time()))
        log.debug("job %s -> %s (%s)", self.job_id, state.value, detail or "")
