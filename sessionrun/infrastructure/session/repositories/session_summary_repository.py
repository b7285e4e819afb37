"""Repository for SessionSummary domain entities."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from sessionrun.domain.common.value_objects import SessionRunId
from sessionrun.domain.session.entities.session_summary import SessionSummary
from sessionrun.infrastructure.session.mappers.session_summary_mapper import SessionSummaryMapper
from sessionrun.models import SessionSummary as SessionSummaryORM


class SessionSummaryRepository:
    """Repository for SessionSummary domain entities."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.mapper = SessionSummaryMapper()

    def find_by_run(self, run_id: SessionRunId) -> SessionSummary | None:
        stmt = select(SessionSummaryORM).where(SessionSummaryORM.run_id == run_id.value)
        orm_model = self.db.execute(stmt).scalar_one_or_none()
        return self.mapper.to_domain(orm_model) if orm_model else None

    def save(self, summary: SessionSummary) -> SessionSummary:
        """Store a summary; the first summary for a run wins."""
        existing = self.find_by_run(summary.run_id)
        if existing is not None:
            return existing
        orm_model = self.mapper.to_orm(summary)
        self.db.add(orm_model)
        self.db.commit()
        self.db.refresh(orm_model)
        return self.mapper.to_domain(orm_model)
