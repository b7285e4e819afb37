"""Mappers for Plan / PlanSession ORM ↔ Domain conversion."""

from sessionrun.domain.common.value_objects import PlanId, PlanSessionId, PublicId, UserId
from sessionrun.domain.session.entities.plan_session import (
    Plan,
    PlanSession,
    PlanStatus,
    SessionStatus,
    SessionType,
)
from sessionrun.infrastructure.session.mappers.session_run_mapper import as_utc
from sessionrun.models import Plan as PlanORM
from sessionrun.models import PlanSession as PlanSessionORM


class PlanMapper:
    def to_domain(self, orm_model: PlanORM) -> Plan:
        return Plan(
            id=PlanId(orm_model.id),
            user_id=UserId(orm_model.user_id),
            title=orm_model.title,
            status=PlanStatus(orm_model.status),
            created_at=as_utc(orm_model.created_at),
            updated_at=as_utc(orm_model.updated_at),
        )

    def to_orm(self, domain_entity: Plan, orm_model: PlanORM) -> PlanORM:
        """Copy status changes onto an existing row; plans are created upstream."""
        orm_model.status = domain_entity.status.value
        return orm_model


class PlanSessionMapper:
    def to_domain(self, orm_model: PlanSessionORM) -> PlanSession:
        return PlanSession(
            id=PlanSessionId(orm_model.id),
            public_id=PublicId(orm_model.public_id),
            plan_id=PlanId(orm_model.plan_id),
            title=orm_model.title,
            session_type=SessionType(orm_model.session_type),
            status=SessionStatus(orm_model.status),
            blueprint_id=orm_model.blueprint_id,
            module_title=orm_model.module_title,
            estimated_minutes=orm_model.estimated_minutes,
            created_at=as_utc(orm_model.created_at),
            updated_at=as_utc(orm_model.updated_at),
        )

    def to_orm(self, domain_entity: PlanSession, orm_model: PlanSessionORM) -> PlanSessionORM:
        """Copy status and blueprint changes onto an existing row."""
        orm_model.status = domain_entity.status.value
        orm_model.blueprint_id = domain_entity.blueprint_id
        return orm_model
