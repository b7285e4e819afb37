"""
Session summary written once a run completes.
"""

from dataclasses import dataclass
from datetime import datetime

from sessionrun.domain.common.exceptions import DomainError
from sessionrun.domain.common.value_objects import SessionRunId


@dataclass
class SessionSummary:
    """
    Completion metadata for a finished run.

    Business Rules:
    - At most one summary per run
    - Summary text cannot be empty
    """

    run_id: SessionRunId
    summary_md: str
    duration_minutes: int = 0
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.summary_md or not self.summary_md.strip():
            raise DomainError("Summary cannot be empty")
        if self.duration_minutes < 0:
            raise DomainError("Duration cannot be negative")
