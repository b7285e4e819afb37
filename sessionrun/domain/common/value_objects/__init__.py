"""Common value objects shared across all domain modules."""

from .ids import PlanId, PlanSessionId, SessionRunId, UserId
from .public_id import PublicId

__all__ = [
    "PlanId",
    "PlanSessionId",
    "PublicId",
    "SessionRunId",
    "UserId",
]
