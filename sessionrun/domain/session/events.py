"""Domain events recorded by the SessionRun aggregate."""

from dataclasses import dataclass
from datetime import datetime

from sessionrun.domain.common.domain_event import DomainEvent
from sessionrun.domain.common.value_objects import (
    PlanId,
    PlanSessionId,
    PublicId,
    SessionRunId,
    UserId,
)


@dataclass(frozen=True, kw_only=True)
class SessionRunStarted(DomainEvent):
    run_public_id: PublicId
    session_id: PlanSessionId
    user_id: UserId
    blueprint_id: str


@dataclass(frozen=True, kw_only=True)
class SessionRunCompleted(DomainEvent):
    """The run reached its summary step. Recorded exactly once per run."""

    run_id: SessionRunId
    run_public_id: PublicId
    session_id: PlanSessionId
    plan_id: PlanId
    user_id: UserId
    started_at: datetime
    ended_at: datetime

    @property
    def duration_minutes(self) -> int:
        return max(0, int((self.ended_at - self.started_at).total_seconds() // 60))


@dataclass(frozen=True, kw_only=True)
class SessionRunAbandoned(DomainEvent):
    run_id: SessionRunId
    run_public_id: PublicId
    session_id: PlanSessionId
    user_id: UserId
    reason: str
