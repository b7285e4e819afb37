"""
Learning plan and learning-session definitions.

Both are owned by the planning side of the product; the run engine only
reads them and moves their status along as runs start and finish.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from sessionrun.domain.common.entity import Entity
from sessionrun.domain.common.value_objects import PlanId, PlanSessionId, PublicId, UserId


class PlanStatus(StrEnum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ARCHIVED = "ARCHIVED"
    COMPLETED = "COMPLETED"


class SessionType(StrEnum):
    LEARN = "LEARN"
    REVIEW = "REVIEW"


class SessionStatus(StrEnum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"
    CANCELED = "CANCELED"


@dataclass(eq=False)
class Plan(Entity[PlanId]):
    """A user's learning plan, grouping scheduled sessions."""

    id: PlanId
    user_id: UserId
    title: str
    status: PlanStatus = PlanStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status is PlanStatus.ACTIVE

    def mark_completed(self) -> None:
        self.status = PlanStatus.COMPLETED


@dataclass(eq=False)
class PlanSession(Entity[PlanSessionId]):
    """
    A scheduled learning session within a plan.

    Business Rules:
    - COMPLETED sessions cannot be started again
    - SKIPPED and CANCELED sessions cannot be started at all
    - Abandoning a run puts the session back to SCHEDULED
    """

    id: PlanSessionId
    public_id: PublicId
    plan_id: PlanId
    title: str
    session_type: SessionType = SessionType.LEARN
    status: SessionStatus = SessionStatus.SCHEDULED
    blueprint_id: str | None = None
    module_title: str | None = None
    estimated_minutes: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is SessionStatus.COMPLETED

    @property
    def is_startable(self) -> bool:
        return self.status in (SessionStatus.SCHEDULED, SessionStatus.IN_PROGRESS)

    @property
    def is_open(self) -> bool:
        """Still counts towards the plan's remaining work."""
        return self.status in (SessionStatus.SCHEDULED, SessionStatus.IN_PROGRESS)

    def attach_blueprint(self, blueprint_id: str) -> None:
        self.blueprint_id = blueprint_id

    def mark_in_progress(self) -> None:
        if self.status is SessionStatus.SCHEDULED:
            self.status = SessionStatus.IN_PROGRESS

    def mark_completed(self) -> None:
        self.status = SessionStatus.COMPLETED

    def mark_scheduled(self) -> None:
        if self.status is SessionStatus.IN_PROGRESS:
            self.status = SessionStatus.SCHEDULED
