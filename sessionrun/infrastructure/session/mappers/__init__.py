from .blueprint_mapper import BlueprintMapper
from .plan_session_mapper import PlanMapper, PlanSessionMapper
from .session_run_mapper import SessionRunMapper
from .session_summary_mapper import SessionSummaryMapper

__all__ = [
    "BlueprintMapper",
    "PlanMapper",
    "PlanSessionMapper",
    "SessionRunMapper",
    "SessionSummaryMapper",
]
