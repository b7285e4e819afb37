from .abandon_run_use_case import AbandonRunUseCase
from .complete_run_use_case import CompleteRunUseCase
from .create_or_resume_run_use_case import CreateOrResumeRunUseCase
from .get_run_use_case import GetRunUseCase
from .save_progress_use_case import SaveProgressUseCase

__all__ = [
    "AbandonRunUseCase",
    "CompleteRunUseCase",
    "CreateOrResumeRunUseCase",
    "GetRunUseCase",
    "SaveProgressUseCase",
]
