"""Completion notifier that stores a short summary for each finished run."""

import structlog

from sessionrun.application.session.protocols.learning_session_repository import (
    LearningSessionRepositoryProtocol,
)
from sessionrun.application.session.protocols.session_summary_repository import (
    SessionSummaryRepositoryProtocol,
)
from sessionrun.domain.session.entities.session_summary import SessionSummary
from sessionrun.domain.session.events import SessionRunCompleted

logger = structlog.get_logger(__name__)


class SessionSummaryWriter:
    """Writes the session summary once a run completes."""

    def __init__(
        self,
        summary_repository: SessionSummaryRepositoryProtocol,
        learning_session_repository: LearningSessionRepositoryProtocol,
    ) -> None:
        self.summary_repository = summary_repository
        self.learning_session_repository = learning_session_repository

    def notify(self, event: SessionRunCompleted) -> None:
        if self.summary_repository.find_by_run(event.run_id) is not None:
            return

        session = self.learning_session_repository.find_by_id(event.session_id)
        title = session.title if session else "Learning session"
        minutes = event.duration_minutes
        unit = "minute" if minutes == 1 else "minutes"

        summary = self.summary_repository.save(
            SessionSummary(
                run_id=event.run_id,
                summary_md=f"**{title}** completed in {minutes} {unit}.",
                duration_minutes=minutes,
            )
        )
        logger.info(
            "session_summary_written",
            run_id=str(event.run_public_id),
            duration_minutes=summary.duration_minutes,
        )
