from dataclasses import dataclass

from ..entity import EntityId


@dataclass(frozen=True)
class UserId(EntityId):
    """Strongly-typed user identifier (issued by the identity provider)."""


@dataclass(frozen=True)
class PlanId(EntityId):
    """Strongly-typed learning plan identifier."""


@dataclass(frozen=True)
class PlanSessionId(EntityId):
    """Strongly-typed identifier of a learning-session definition."""


@dataclass(frozen=True)
class SessionRunId(EntityId):
    """Strongly-typed session run identifier (internal, database assigned)."""
