from .session_run_dtos import (
    AbandonRunResult,
    CompleteRunResult,
    CreateOrResumeResult,
    RunSnapshot,
    SaveProgressResult,
)

__all__ = [
    "AbandonRunResult",
    "CompleteRunResult",
    "CreateOrResumeResult",
    "RunSnapshot",
    "SaveProgressResult",
]
