"""Use case for abandoning a session run."""

import structlog

from sessionrun.application.session.protocols.learning_session_repository import (
    LearningSessionRepositoryProtocol,
)
from sessionrun.application.session.protocols.session_run_repository import (
    SessionRunRepositoryProtocol,
)
from sessionrun.application.session.use_cases.dtos import AbandonRunResult
from sessionrun.application.session.use_cases.session_runs.run_lookup import load_owned_run
from sessionrun.domain.session.entities.session_run import ExitReason
from sessionrun.exceptions import ValidationError

logger = structlog.get_logger(__name__)


class AbandonRunUseCase:
    """Use case for leaving a run before it reaches its summary."""

    def __init__(
        self,
        run_repository: SessionRunRepositoryProtocol,
        learning_session_repository: LearningSessionRepositoryProtocol,
    ) -> None:
        self.run_repository = run_repository
        self.learning_session_repository = learning_session_repository

    def abandon(
        self, user_id: int, run_id: str, reason: str = ExitReason.USER_EXIT
    ) -> AbandonRunResult:
        """
        Abandon a run.

        The run is stored as terminal (completed with an exit reason) so a
        new run can be started for the session later. The session goes back
        to SCHEDULED. Abandoning a terminal run changes nothing.

        Raises:
            RunNotFoundError: If the run does not exist for the user
            ValidationError: If the reason is not a known exit reason
        """
        try:
            exit_reason = ExitReason(reason)
        except ValueError as e:
            raise ValidationError(f"Unknown exit reason: {reason}") from e

        run = load_owned_run(self.run_repository, user_id, run_id)
        if run.is_terminal:
            return AbandonRunResult(run=run)

        run.abandon(exit_reason)
        run.collect_events()
        run = self.run_repository.save(run)

        session = self.learning_session_repository.find_by_id(run.session_id)
        if session is not None:
            session.mark_scheduled()
            self.learning_session_repository.save_session(session)

        logger.info(
            "session_run_abandoned",
            run_id=run_id,
            reason=exit_reason,
            current_step_id=run.current_step_id,
        )
        return AbandonRunResult(run=run)
