"""Mapper for SessionRun ORM ↔ Domain conversion."""

from datetime import UTC, datetime

from sessionrun.domain.common.value_objects import (
    PlanId,
    PlanSessionId,
    PublicId,
    SessionRunId,
    UserId,
)
from sessionrun.domain.session.entities.session_run import ExitReason, RunStatus, SessionRun
from sessionrun.domain.session.value_objects.run_inputs import RunInputs
from sessionrun.models import SessionRun as SessionRunORM


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; stored values are always UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SessionRunMapper:
    """Mapper for SessionRun ORM ↔ Domain conversion."""

    def to_domain(self, orm_model: SessionRunORM) -> SessionRun:
        """Convert ORM model to domain entity."""
        history = [step_id for step_id in orm_model.step_history or [] if isinstance(step_id, str)]
        if not history:
            history = [orm_model.current_step_id]
        history_index = min(max(orm_model.history_index, 0), len(history) - 1)

        return SessionRun.create_with_id(
            id=SessionRunId(orm_model.id),
            public_id=PublicId(orm_model.public_id),
            session_id=PlanSessionId(orm_model.session_id),
            user_id=UserId(orm_model.user_id),
            plan_id=PlanId(orm_model.plan_id),
            blueprint_id=orm_model.blueprint_id,
            step_history=history,
            history_index=history_index,
            inputs=RunInputs.rehydrate(orm_model.inputs),
            status=RunStatus(orm_model.status),
            exit_reason=ExitReason(orm_model.exit_reason) if orm_model.exit_reason else None,
            is_recovery=orm_model.is_recovery,
            idempotency_key=orm_model.idempotency_key,
            started_at=as_utc(orm_model.started_at) or datetime.now(UTC),
            ended_at=as_utc(orm_model.ended_at),
            created_at=as_utc(orm_model.created_at),
            updated_at=as_utc(orm_model.updated_at),
        )

    def to_orm(
        self, domain_entity: SessionRun, orm_model: SessionRunORM | None = None
    ) -> SessionRunORM:
        """Convert domain entity to ORM model."""
        if orm_model:
            # Only mutable state; identity columns never change
            orm_model.status = domain_entity.status.value
            orm_model.exit_reason = (
                domain_entity.exit_reason.value if domain_entity.exit_reason else None
            )
            orm_model.is_recovery = domain_entity.is_recovery
            orm_model.current_step_id = domain_entity.current_step_id
            orm_model.step_history = list(domain_entity.step_history)
            orm_model.history_index = domain_entity.history_index
            orm_model.inputs = domain_entity.inputs.to_payload()
            orm_model.ended_at = domain_entity.ended_at
            if domain_entity.updated_at:
                orm_model.updated_at = domain_entity.updated_at
            return orm_model

        return SessionRunORM(
            public_id=str(domain_entity.public_id),
            user_id=domain_entity.user_id.value,
            session_id=domain_entity.session_id.value,
            plan_id=domain_entity.plan_id.value,
            blueprint_id=domain_entity.blueprint_id,
            status=domain_entity.status.value,
            exit_reason=domain_entity.exit_reason.value if domain_entity.exit_reason else None,
            is_recovery=domain_entity.is_recovery,
            current_step_id=domain_entity.current_step_id,
            step_history=list(domain_entity.step_history),
            history_index=domain_entity.history_index,
            inputs=domain_entity.inputs.to_payload(),
            idempotency_key=domain_entity.idempotency_key,
            started_at=domain_entity.started_at,
            ended_at=domain_entity.ended_at,
        )
