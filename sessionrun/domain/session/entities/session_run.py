"""
SessionRun aggregate root.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from sessionrun.domain.common.aggregate_root import AggregateRoot
from sessionrun.domain.common.exceptions import InvariantViolationError
from sessionrun.domain.common.value_objects import (
    PlanId,
    PlanSessionId,
    PublicId,
    SessionRunId,
    UserId,
)
from sessionrun.domain.session.events import (
    SessionRunAbandoned,
    SessionRunCompleted,
    SessionRunStarted,
)
from sessionrun.domain.session.exceptions import InvalidRunTransitionError
from sessionrun.domain.session.value_objects.run_inputs import RunInputs


class RunStatus(StrEnum):
    ACTIVE = "ACTIVE"
    COMPLETING = "COMPLETING"
    COMPLETED = "COMPLETED"


class ExitReason(StrEnum):
    USER_EXIT = "USER_EXIT"
    NETWORK = "NETWORK"
    ERROR = "ERROR"
    TIMEOUT = "TIMEOUT"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False)
class SessionRun(AggregateRoot[SessionRunId]):
    """
    One user's attempt at one learning session.

    Business Rules:
    - step_history is never empty and history_index points into it
    - The current step is always step_history[history_index]
    - Status only moves forward: ACTIVE -> COMPLETING -> COMPLETED,
      or ACTIVE -> COMPLETED when abandoned
    - Once COMPLETED, position and inputs are frozen
    """

    # Identity
    id: SessionRunId
    public_id: PublicId
    session_id: PlanSessionId
    user_id: UserId
    plan_id: PlanId
    blueprint_id: str

    # Position
    step_history: list[str]
    history_index: int = 0
    inputs: RunInputs = field(default_factory=RunInputs)

    # Lifecycle
    status: RunStatus = RunStatus.ACTIVE
    exit_reason: ExitReason | None = None
    is_recovery: bool = False
    idempotency_key: str | None = None

    # Timestamps
    started_at: datetime = field(default_factory=_utcnow)
    ended_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        self._check_position(self.step_history, self.history_index)

    @staticmethod
    def _check_position(step_history: list[str], history_index: int) -> None:
        if not step_history:
            raise InvariantViolationError("SessionRun", "step history cannot be empty")
        if not 0 <= history_index < len(step_history):
            raise InvariantViolationError(
                "SessionRun", f"history index {history_index} is outside the step history"
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_step_id(self) -> str:
        return self.step_history[self.history_index]

    @property
    def is_terminal(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def is_abandoned(self) -> bool:
        return self.is_terminal and self.exit_reason is not None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def mark_recovered(self, now: datetime | None = None) -> None:
        """Flag the run as resumed after an interruption."""
        self.is_recovery = True
        self.updated_at = now or _utcnow()

    def record_progress(
        self,
        step_history: list[str],
        history_index: int,
        inputs: RunInputs,
        now: datetime | None = None,
    ) -> None:
        """
        Replace position and inputs with the latest client snapshot.

        Raises:
            InvalidRunTransitionError: If the run is already completed
            InvariantViolationError: If the position is inconsistent
        """
        if self.is_terminal:
            raise InvalidRunTransitionError(self.status, "progress")
        self._check_position(step_history, history_index)
        self.step_history = list(step_history)
        self.history_index = history_index
        self.inputs = inputs
        self.updated_at = now or _utcnow()

    def complete(self, now: datetime | None = None) -> bool:
        """
        Finish the run.

        Returns:
            True if the run transitioned, False if it was already completed
        """
        if self.is_terminal:
            return False
        ended_at = now or _utcnow()
        self.status = RunStatus.COMPLETED
        self.ended_at = ended_at
        self.updated_at = ended_at
        self._record_event(
            SessionRunCompleted(
                run_id=self.id,
                run_public_id=self.public_id,
                session_id=self.session_id,
                plan_id=self.plan_id,
                user_id=self.user_id,
                started_at=self.started_at,
                ended_at=ended_at,
            )
        )
        return True

    def abandon(self, reason: ExitReason, now: datetime | None = None) -> bool:
        """
        Leave the run before reaching the summary.

        The run becomes terminal so a fresh run can be started for the session.

        Returns:
            True if the run transitioned, False if it was already completed
        """
        if self.is_terminal:
            return False
        ended_at = now or _utcnow()
        self.status = RunStatus.COMPLETED
        self.exit_reason = ExitReason(reason)
        self.ended_at = ended_at
        self.updated_at = ended_at
        self._record_event(
            SessionRunAbandoned(
                run_id=self.id,
                run_public_id=self.public_id,
                session_id=self.session_id,
                user_id=self.user_id,
                reason=self.exit_reason,
            )
        )
        return True

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        user_id: UserId,
        session_id: PlanSessionId,
        plan_id: PlanId,
        blueprint_id: str,
        start_step_id: str,
        idempotency_key: str | None = None,
        public_id: PublicId | None = None,
        now: datetime | None = None,
    ) -> "SessionRun":
        """Create a fresh run positioned on the blueprint's start step."""
        started_at = now or _utcnow()
        run = cls(
            id=SessionRunId.generate(),
            public_id=public_id or PublicId.generate(),
            session_id=session_id,
            user_id=user_id,
            plan_id=plan_id,
            blueprint_id=blueprint_id,
            step_history=[start_step_id],
            history_index=0,
            inputs=RunInputs.empty(),
            status=RunStatus.ACTIVE,
            idempotency_key=idempotency_key,
            started_at=started_at,
            created_at=started_at,
            updated_at=started_at,
        )
        run._record_event(
            SessionRunStarted(
                run_public_id=run.public_id,
                session_id=session_id,
                user_id=user_id,
                blueprint_id=blueprint_id,
            )
        )
        return run

    @classmethod
    def create_with_id(
        cls,
        id: SessionRunId,
        public_id: PublicId,
        session_id: PlanSessionId,
        user_id: UserId,
        plan_id: PlanId,
        blueprint_id: str,
        step_history: list[str],
        history_index: int,
        inputs: RunInputs,
        status: RunStatus,
        started_at: datetime,
        exit_reason: ExitReason | None = None,
        is_recovery: bool = False,
        idempotency_key: str | None = None,
        ended_at: datetime | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "SessionRun":
        """Reconstitute a run from persistence."""
        return cls(
            id=id,
            public_id=public_id,
            session_id=session_id,
            user_id=user_id,
            plan_id=plan_id,
            blueprint_id=blueprint_id,
            step_history=list(step_history),
            history_index=history_index,
            inputs=inputs,
            status=status,
            exit_reason=exit_reason,
            is_recovery=is_recovery,
            idempotency_key=idempotency_key,
            started_at=started_at,
            ended_at=ended_at,
            created_at=created_at,
            updated_at=updated_at,
        )
