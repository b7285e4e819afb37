"""Mapper for SessionSummary ORM ↔ Domain conversion."""

from sessionrun.domain.common.value_objects import SessionRunId
from sessionrun.domain.session.entities.session_summary import SessionSummary
from sessionrun.infrastructure.session.mappers.session_run_mapper import as_utc
from sessionrun.models import SessionSummary as SessionSummaryORM


class SessionSummaryMapper:
    """Mapper for SessionSummary ORM ↔ Domain conversion."""

    def to_domain(self, orm_model: SessionSummaryORM) -> SessionSummary:
        return SessionSummary(
            run_id=SessionRunId(orm_model.run_id),
            summary_md=orm_model.summary_md,
            duration_minutes=orm_model.duration_minutes,
            created_at=as_utc(orm_model.created_at),
        )

    def to_orm(self, domain_entity: SessionSummary) -> SessionSummaryORM:
        return SessionSummaryORM(
            run_id=domain_entity.run_id.value,
            summary_md=domain_entity.summary_md,
            duration_minutes=domain_entity.duration_minutes,
        )
