"""Use case for completing a session run."""

from collections.abc import Sequence

import structlog

from sessionrun.application.session.protocols.learning_session_repository import (
    LearningSessionRepositoryProtocol,
)
from sessionrun.application.session.protocols.run_completion_notifier import (
    RunCompletionNotifierProtocol,
)
from sessionrun.application.session.protocols.session_run_repository import (
    SessionRunRepositoryProtocol,
)
from sessionrun.application.session.use_cases.dtos import CompleteRunResult
from sessionrun.application.session.use_cases.session_runs.run_lookup import load_owned_run
from sessionrun.domain.common.domain_event import DomainEvent
from sessionrun.domain.session.entities.plan_session import PlanStatus
from sessionrun.domain.session.entities.session_run import SessionRun
from sessionrun.domain.session.events import SessionRunCompleted

logger = structlog.get_logger(__name__)


class CompleteRunUseCase:
    """Use case for the irreversible completion of a run."""

    def __init__(
        self,
        run_repository: SessionRunRepositoryProtocol,
        learning_session_repository: LearningSessionRepositoryProtocol,
        notifiers: Sequence[RunCompletionNotifierProtocol] = (),
    ) -> None:
        self.run_repository = run_repository
        self.learning_session_repository = learning_session_repository
        self.notifiers = list(notifiers)

    def complete(self, user_id: int, run_id: str) -> CompleteRunResult:
        """
        Mark a run as completed.

        Idempotent: completing an already completed run succeeds without
        side effects. Completion notifiers run after the run is stored and
        never fail the request.

        Args:
            user_id: ID of the user
            run_id: Public id of the run

        Returns:
            CompleteRunResult with the stored run

        Raises:
            RunNotFoundError: If the run does not exist for the user
        """
        run = load_owned_run(self.run_repository, user_id, run_id)
        if run.is_terminal:
            logger.info("session_run_already_completed", run_id=run_id)
            return CompleteRunResult(run=run, already_completed=True)

        run.complete()
        events = run.collect_events()
        run = self.run_repository.save(run)
        self._finish_session(run)

        logger.info(
            "session_run_completed",
            run_id=run_id,
            session_id=run.session_id.value,
            steps_visited=len(run.step_history),
        )
        self._dispatch(events)
        return CompleteRunResult(run=run, already_completed=False)

    def _finish_session(self, run: SessionRun) -> None:
        session = self.learning_session_repository.find_by_id(run.session_id)
        if session is None:
            return
        session.mark_completed()
        self.learning_session_repository.save_session(session)

        plan = self.learning_session_repository.find_plan(session.plan_id)
        if plan is None or plan.status is PlanStatus.COMPLETED:
            return
        if self.learning_session_repository.count_open_sessions(plan.id) == 0:
            plan.mark_completed()
            self.learning_session_repository.save_plan(plan)
            logger.info("plan_completed", plan_id=plan.id.value)

    def _dispatch(self, events: list[DomainEvent]) -> None:
        for event in events:
            if not isinstance(event, SessionRunCompleted):
                continue
            for notifier in self.notifiers:
                try:
                    notifier.notify(event)
                except Exception:
                    # Downstream work is fire-and-forget; completion already stands
                    logger.exception(
                        "completion_notifier_failed",
                        notifier=type(notifier).__name__,
                        run_id=str(event.run_public_id),
                    )
