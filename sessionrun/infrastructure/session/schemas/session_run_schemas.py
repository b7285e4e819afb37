"""Pydantic schemas for session run API request/response validation."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from sessionrun.domain.session.entities.session_run import ExitReason


class StartRunResponse(BaseModel):
    """Schema for the create-or-resume response."""

    run_id: str = Field(..., description="Public id of the run")
    session_id: str = Field(..., description="Public id of the learning session")
    status: str = Field(..., description="Run status")
    is_recovery: bool = Field(..., description="True when an interrupted run was resumed")
    current_step_id: str = Field(..., description="Step the learner is on")


class ProgressSchema(BaseModel):
    current_step_number: int
    total_steps: int
    percent: int


class SessionSummarySchema(BaseModel):
    summary_md: str
    duration_minutes: int
    created_at: datetime | None = None


class SessionRunResponse(BaseModel):
    """Schema for a run with its blueprint, position and inputs."""

    run_id: str
    blueprint_id: str
    status: str
    exit_reason: str | None = None
    is_recovery: bool
    current_step_id: str
    step_history: list[str]
    history_index: int
    inputs: dict[str, Any] = Field(..., description="camelCase input bag, empty groups omitted")
    progress: ProgressSchema
    blueprint: dict[str, Any] = Field(..., description="Blueprint document")
    summary: SessionSummarySchema | None = None
    started_at: datetime
    ended_at: datetime | None = None
    updated_at: datetime | None = None


class SaveProgressRequest(BaseModel):
    """
    Schema for an autosave.

    `inputs` is accepted as-is and validated by the use case so a malformed
    bag is dropped instead of rejecting the request.
    """

    step_index: int | None = Field(None, description="Index of the current step in the blueprint")
    inputs: Any = Field(None, description="camelCase input bag")
    step_history: list[str] | None = Field(None, description="Full navigation history")
    history_index: int | None = Field(None, description="Position within step_history")


class SaveProgressResponse(BaseModel):
    run_id: str
    saved: bool = Field(..., description="False when the save was a no-op or was dropped")
    saved_at: datetime


class CompleteRunResponse(BaseModel):
    run_id: str
    status: str


class AbandonRunRequest(BaseModel):
    reason: ExitReason = Field(ExitReason.USER_EXIT, description="Why the learner left")


class AbandonRunResponse(BaseModel):
    run_id: str
    status: str
