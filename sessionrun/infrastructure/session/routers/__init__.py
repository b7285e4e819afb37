from .session_runs import router as session_runs_router

__all__ = ["session_runs_router"]
