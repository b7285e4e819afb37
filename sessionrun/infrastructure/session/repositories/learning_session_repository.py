"""Repository for plans and their learning sessions."""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sessionrun.domain.common.value_objects import PlanId, PlanSessionId, PublicId, UserId
from sessionrun.domain.session.entities.plan_session import Plan, PlanSession, SessionStatus
from sessionrun.infrastructure.session.mappers.plan_session_mapper import (
    PlanMapper,
    PlanSessionMapper,
)
from sessionrun.models import Plan as PlanORM
from sessionrun.models import PlanSession as PlanSessionORM

OPEN_SESSION_STATUSES = (SessionStatus.SCHEDULED.value, SessionStatus.IN_PROGRESS.value)


class LearningSessionRepository:
    """Repository for PlanSession and Plan domain entities."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.session_mapper = PlanSessionMapper()
        self.plan_mapper = PlanMapper()

    def find_by_public_id(self, public_id: PublicId, user_id: UserId) -> PlanSession | None:
        """
        Find a learning session with ownership check through its plan.

        Args:
            public_id: The session's public id
            user_id: The user ID for ownership verification

        Returns:
            PlanSession if found and owned by user, None otherwise
        """
        stmt = (
            select(PlanSessionORM)
            .join(PlanORM, PlanSessionORM.plan_id == PlanORM.id)
            .where(
                PlanSessionORM.public_id == public_id.value,
                PlanORM.user_id == user_id.value,
            )
        )
        orm_model = self.db.execute(stmt).scalar_one_or_none()
        return self.session_mapper.to_domain(orm_model) if orm_model else None

    def find_by_id(self, session_id: PlanSessionId) -> PlanSession | None:
        orm_model = self.db.get(PlanSessionORM, session_id.value)
        return self.session_mapper.to_domain(orm_model) if orm_model else None

    def find_plan(self, plan_id: PlanId) -> Plan | None:
        orm_model = self.db.get(PlanORM, plan_id.value)
        return self.plan_mapper.to_domain(orm_model) if orm_model else None

    def count_open_sessions(self, plan_id: PlanId) -> int:
        """
        Count sessions still to be done in a plan.

        Args:
            plan_id: The plan ID

        Returns:
            Count of SCHEDULED or IN_PROGRESS sessions
        """
        stmt = select(func.count(PlanSessionORM.id)).where(
            PlanSessionORM.plan_id == plan_id.value,
            PlanSessionORM.status.in_(OPEN_SESSION_STATUSES),
        )
        return self.db.execute(stmt).scalar() or 0

    def save_session(self, session: PlanSession) -> PlanSession:
        orm_model = self.db.get(PlanSessionORM, session.id.value)
        if not orm_model:
            raise ValueError(f"Learning session {session.id.value} not found")
        self.session_mapper.to_orm(session, orm_model)
        self.db.commit()
        self.db.refresh(orm_model)
        return self.session_mapper.to_domain(orm_model)

    def save_plan(self, plan: Plan) -> Plan:
        orm_model = self.db.get(PlanORM, plan.id.value)
        if not orm_model:
            raise ValueError(f"Plan {plan.id.value} not found")
        self.plan_mapper.to_orm(plan, orm_model)
        self.db.commit()
        self.db.refresh(orm_model)
        return self.plan_mapper.to_domain(orm_model)
