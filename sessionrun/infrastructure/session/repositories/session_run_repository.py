"""Repository for SessionRun domain entities."""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sessionrun.domain.common.value_objects import PlanSessionId, PublicId, UserId
from sessionrun.domain.session.entities.session_run import RunStatus, SessionRun
from sessionrun.exceptions import ConcurrentRunExistsError
from sessionrun.infrastructure.session.mappers.session_run_mapper import SessionRunMapper
from sessionrun.models import SessionRun as SessionRunORM

logger = logging.getLogger(__name__)


class SessionRunRepository:
    """Repository for SessionRun domain entities."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.mapper = SessionRunMapper()

    def find_by_public_id(self, public_id: PublicId, user_id: UserId) -> SessionRun | None:
        """
        Find a run by public id with user ownership check.

        Args:
            public_id: The run's public id
            user_id: The user ID for ownership verification

        Returns:
            SessionRun if found and owned by user, None otherwise
        """
        stmt = select(SessionRunORM).where(
            SessionRunORM.public_id == public_id.value,
            SessionRunORM.user_id == user_id.value,
        )
        orm_model = self.db.execute(stmt).scalar_one_or_none()
        return self.mapper.to_domain(orm_model) if orm_model else None

    def find_active(self, user_id: UserId, session_id: PlanSessionId) -> SessionRun | None:
        """Find the user's non-terminal run for a learning session."""
        stmt = (
            select(SessionRunORM)
            .where(
                SessionRunORM.user_id == user_id.value,
                SessionRunORM.session_id == session_id.value,
                SessionRunORM.status != RunStatus.COMPLETED.value,
            )
            .order_by(SessionRunORM.created_at.desc())
            .limit(1)
        )
        orm_model = self.db.execute(stmt).scalar_one_or_none()
        return self.mapper.to_domain(orm_model) if orm_model else None

    def find_by_idempotency_key(self, user_id: UserId, idempotency_key: str) -> SessionRun | None:
        stmt = select(SessionRunORM).where(
            SessionRunORM.user_id == user_id.value,
            SessionRunORM.idempotency_key == idempotency_key,
        )
        orm_model = self.db.execute(stmt).scalar_one_or_none()
        return self.mapper.to_domain(orm_model) if orm_model else None

    def save(self, run: SessionRun) -> SessionRun:
        """
        Save a run (create or update).

        Args:
            run: The run to save

        Returns:
            Saved run with database-generated values

        Raises:
            ConcurrentRunExistsError: If the insert hits the one-active-run or
                idempotency-key constraint
        """
        if run.id.is_transient:
            orm_model = self.mapper.to_orm(run)
            self.db.add(orm_model)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                logger.info(
                    "Concurrent start for user %s session %s rejected by constraint",
                    run.user_id.value,
                    run.session_id.value,
                )
                raise ConcurrentRunExistsError from e
            self.db.refresh(orm_model)
            return self.mapper.to_domain(orm_model)

        orm_model = self.db.get(SessionRunORM, run.id.value)
        if not orm_model:
            raise ValueError(f"Session run {run.id.value} not found")
        self.mapper.to_orm(run, orm_model)
        self.db.commit()
        self.db.refresh(orm_model)
        return self.mapper.to_domain(orm_model)

    def save_progress(self, run: SessionRun) -> bool:
        """
        Write a run's position and inputs unless the stored run is completed.

        The status columns are not written, so a stale copy of the run can
        never reopen a finished one.

        Returns:
            True if the row was updated, False if the run is already completed
        """
        stmt = (
            update(SessionRunORM)
            .where(
                SessionRunORM.id == run.id.value,
                SessionRunORM.status != RunStatus.COMPLETED.value,
            )
            .values(
                current_step_id=run.current_step_id,
                step_history=list(run.step_history),
                history_index=run.history_index,
                inputs=run.inputs.to_payload(),
                updated_at=run.updated_at,
            )
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount > 0
