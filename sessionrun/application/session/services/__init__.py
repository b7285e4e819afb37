from .autosave_scheduler import AutosaveScheduler
from .run_controller import RunController
from .session_summary_writer import SessionSummaryWriter

__all__ = ["AutosaveScheduler", "RunController", "SessionSummaryWriter"]
