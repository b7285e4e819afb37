"""Protocol for SessionSummary repository."""

from typing import Protocol

from sessionrun.domain.common.value_objects import SessionRunId
from sessionrun.domain.session.entities.session_summary import SessionSummary


class SessionSummaryRepositoryProtocol(Protocol):
    def find_by_run(self, run_id: SessionRunId) -> SessionSummary | None:
        ...

    def save(self, summary: SessionSummary) -> SessionSummary:
        """Store a summary. A second summary for the same run is ignored."""
        ...
