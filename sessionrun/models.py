"""Database models."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sessionrun.database import Base

ACTIVE_RUN_CONDITION = "status != 'COMPLETED'"


class Plan(Base):
    """Learning plan owned by a user."""

    __tablename__ = "plans"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    sessions: Mapped[list["PlanSession"]] = relationship(
        back_populates="plan", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        """String representation of Plan."""
        return f"<Plan(id={self.id}, title='{self.title}', status={self.status})>"


class PlanSession(Base):
    """A scheduled learning session within a plan."""

    __tablename__ = "plan_sessions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    public_id: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    plan_id: Mapped[int] = mapped_column(
        ForeignKey("plans.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    module_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    session_type: Mapped[str] = mapped_column(String(20), nullable=False, default="LEARN")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="SCHEDULED")
    blueprint_id: Mapped[str | None] = mapped_column(
        ForeignKey("session_blueprints.blueprint_id"), nullable=True
    )
    estimated_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    plan: Mapped[Plan] = relationship(back_populates="sessions")

    def __repr__(self) -> str:
        """String representation of PlanSession."""
        return f"<PlanSession(id={self.id}, public_id='{self.public_id}', status={self.status})>"


class SessionBlueprint(Base):
    """Versioned blueprint document. Rows are written once and never updated."""

    __tablename__ = "session_blueprints"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    blueprint_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    schema_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    document: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        """String representation of SessionBlueprint."""
        return f"<SessionBlueprint(blueprint_id='{self.blueprint_id}')>"


class SessionRun(Base):
    """One user's run through a learning session."""

    __tablename__ = "session_runs"
    __table_args__ = (
        # At most one non-terminal run per user and session
        Index(
            "uq_session_runs_active_user_session",
            "user_id",
            "session_id",
            unique=True,
            postgresql_where=text(ACTIVE_RUN_CONDITION),
            sqlite_where=text(ACTIVE_RUN_CONDITION),
        ),
        UniqueConstraint("user_id", "idempotency_key", name="uq_session_runs_idempotency_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    public_id: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    session_id: Mapped[int] = mapped_column(
        ForeignKey("plan_sessions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    plan_id: Mapped[int] = mapped_column(
        ForeignKey("plans.id", ondelete="CASCADE"), index=True, nullable=False
    )
    blueprint_id: Mapped[str] = mapped_column(
        ForeignKey("session_blueprints.blueprint_id"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    exit_reason: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_recovery: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    current_step_id: Mapped[str] = mapped_column(String(100), nullable=False)
    step_history: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    history_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inputs: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    idempotency_key: Mapped[str | None] = mapped_column(String(100), nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of SessionRun."""
        return f"<SessionRun(id={self.id}, public_id='{self.public_id}', status={self.status})>"


class SessionSummary(Base):
    """Summary written when a run completes."""

    __tablename__ = "session_summaries"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("session_runs.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    summary_md: Mapped[str] = mapped_column(Text, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        """String representation of SessionSummary."""
        return f"<SessionSummary(run_id={self.run_id})>"
