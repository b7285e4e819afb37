from .blueprint_repository import BlueprintRepository
from .learning_session_repository import LearningSessionRepository
from .session_run_repository import SessionRunRepository
from .session_summary_repository import SessionSummaryRepository

__all__ = [
    "BlueprintRepository",
    "LearningSessionRepository",
    "SessionRunRepository",
    "SessionSummaryRepository",
]
