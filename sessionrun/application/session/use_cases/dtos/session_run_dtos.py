"""DTOs for session run use cases."""

from dataclasses import dataclass
from datetime import datetime

from sessionrun.domain.session.entities.blueprint import Blueprint
from sessionrun.domain.session.entities.session_run import RunStatus, SessionRun
from sessionrun.domain.session.entities.session_summary import SessionSummary
from sessionrun.domain.session.services.step_graph_resolver import Progress

ABANDONED_STATUS = "ABANDONED"


@dataclass
class CreateOrResumeResult:
    """Outcome of starting a session: a new run, or the one already under way."""

    run: SessionRun
    is_recovery: bool
    created: bool


@dataclass
class RunSnapshot:
    """DTO for a run with everything a client needs to render it."""

    run: SessionRun
    blueprint: Blueprint
    progress: Progress
    summary: SessionSummary | None = None


@dataclass
class SaveProgressResult:
    saved_at: datetime
    saved: bool


@dataclass
class CompleteRunResult:
    run: SessionRun
    already_completed: bool

    @property
    def status(self) -> str:
        return RunStatus.COMPLETED.value


@dataclass
class AbandonRunResult:
    run: SessionRun

    @property
    def status(self) -> str:
        return ABANDONED_STATUS
