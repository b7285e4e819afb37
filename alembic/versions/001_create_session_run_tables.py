"""Create plans, learning sessions, blueprints, session runs and summaries.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ACTIVE_RUN_CONDITION = "status != 'COMPLETED'"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create session run tables."""
    op.create_table(
        "plans",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_plans_id"), "plans", ["id"], unique=False)
    op.create_index(op.f("ix_plans_user_id"), "plans", ["user_id"], unique=False)

    op.create_table(
        "session_blueprints",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("blueprint_id", sa.String(64), nullable=False),
        sa.Column("schema_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("document", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_session_blueprints_id"), "session_blueprints", ["id"], unique=False)
    op.create_index(
        op.f("ix_session_blueprints_blueprint_id"),
        "session_blueprints",
        ["blueprint_id"],
        unique=True,
    )

    op.create_table(
        "plan_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("public_id", sa.String(32), nullable=False),
        sa.Column("plan_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("module_title", sa.String(500), nullable=True),
        sa.Column("session_type", sa.String(20), nullable=False, server_default="LEARN"),
        sa.Column("status", sa.String(20), nullable=False, server_default="SCHEDULED"),
        sa.Column("blueprint_id", sa.String(64), nullable=True),
        sa.Column("estimated_minutes", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["blueprint_id"], ["session_blueprints.blueprint_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_plan_sessions_id"), "plan_sessions", ["id"], unique=False)
    op.create_index(op.f("ix_plan_sessions_public_id"), "plan_sessions", ["public_id"], unique=True)
    op.create_index(op.f("ix_plan_sessions_plan_id"), "plan_sessions", ["plan_id"], unique=False)

    op.create_table(
        "session_runs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("public_id", sa.String(32), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("plan_id", sa.Integer(), nullable=False),
        sa.Column("blueprint_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("exit_reason", sa.String(20), nullable=True),
        sa.Column("is_recovery", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("current_step_id", sa.String(100), nullable=False),
        sa.Column("step_history", sa.JSON(), nullable=False),
        sa.Column("history_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("inputs", sa.JSON(), nullable=False),
        sa.Column("idempotency_key", sa.String(100), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["session_id"], ["plan_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["blueprint_id"], ["session_blueprints.blueprint_id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "idempotency_key", name="uq_session_runs_idempotency_key"),
    )
    op.create_index(op.f("ix_session_runs_id"), "session_runs", ["id"], unique=False)
    op.create_index(op.f("ix_session_runs_public_id"), "session_runs", ["public_id"], unique=True)
    op.create_index(op.f("ix_session_runs_user_id"), "session_runs", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_session_runs_session_id"), "session_runs", ["session_id"], unique=False
    )
    op.create_index(op.f("ix_session_runs_plan_id"), "session_runs", ["plan_id"], unique=False)
    op.create_index(
        "uq_session_runs_active_user_session",
        "session_runs",
        ["user_id", "session_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_RUN_CONDITION),
        sqlite_where=sa.text(ACTIVE_RUN_CONDITION),
    )

    op.create_table(
        "session_summaries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("run_id", sa.Integer(), nullable=False),
        sa.Column("summary_md", sa.Text(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["run_id"], ["session_runs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("run_id"),
    )
    op.create_index(op.f("ix_session_summaries_id"), "session_summaries", ["id"], unique=False)


def downgrade() -> None:
    """Drop session run tables."""
    op.drop_index(op.f("ix_session_summaries_id"), table_name="session_summaries")
    op.drop_table("session_summaries")

    op.drop_index("uq_session_runs_active_user_session", table_name="session_runs")
    op.drop_index(op.f("ix_session_runs_plan_id"), table_name="session_runs")
    op.drop_index(op.f("ix_session_runs_session_id"), table_name="session_runs")
    op.drop_index(op.f("ix_session_runs_user_id"), table_name="session_runs")
    op.drop_index(op.f("ix_session_runs_public_id"), table_name="session_runs")
    op.drop_index(op.f("ix_session_runs_id"), table_name="session_runs")
    op.drop_table("session_runs")

    op.drop_index(op.f("ix_plan_sessions_plan_id"), table_name="plan_sessions")
    op.drop_index(op.f("ix_plan_sessions_public_id"), table_name="plan_sessions")
    op.drop_index(op.f("ix_plan_sessions_id"), table_name="plan_sessions")
    op.drop_table("plan_sessions")

    op.drop_index(op.f("ix_session_blueprints_blueprint_id"), table_name="session_blueprints")
    op.drop_index(op.f("ix_session_blueprints_id"), table_name="session_blueprints")
    op.drop_table("session_blueprints")

    op.drop_index(op.f("ix_plans_user_id"), table_name="plans")
    op.drop_index(op.f("ix_plans_id"), table_name="plans")
    op.drop_table("plans")
