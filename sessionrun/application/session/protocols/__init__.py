from .blueprint_provider import BlueprintProviderProtocol
from .learning_session_repository import LearningSessionRepositoryProtocol
from .run_completion_notifier import RunCompletionNotifierProtocol
from .session_run_repository import SessionRunRepositoryProtocol
from .session_summary_repository import SessionSummaryRepositoryProtocol

__all__ = [
    "BlueprintProviderProtocol",
    "LearningSessionRepositoryProtocol",
    "RunCompletionNotifierProtocol",
    "SessionRunRepositoryProtocol",
    "SessionSummaryRepositoryProtocol",
]
