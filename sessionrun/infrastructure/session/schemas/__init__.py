"""Session context schemas."""

from sessionrun.infrastructure.session.schemas.blueprint_schemas import BlueprintDocument
from sessionrun.infrastructure.session.schemas.session_run_schemas import (
    AbandonRunRequest,
    AbandonRunResponse,
    CompleteRunResponse,
    ProgressSchema,
    SaveProgressRequest,
    SaveProgressResponse,
    SessionRunResponse,
    SessionSummarySchema,
    StartRunResponse,
)

__all__ = [
    "AbandonRunRequest",
    "AbandonRunResponse",
    "BlueprintDocument",
    "CompleteRunResponse",
    "ProgressSchema",
    "SaveProgressRequest",
    "SaveProgressResponse",
    "SessionRunResponse",
    "SessionSummarySchema",
    "StartRunResponse",
]
