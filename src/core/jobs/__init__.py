"""Job lifecycle tracking for the two-phase ingestion run."""

from .state import IngestState
from .state_machine import JobEvent, JobState, JobStateMachine

__all__ = ["IngestState", "JobEvent", "JobState", "JobStateMachine"]
