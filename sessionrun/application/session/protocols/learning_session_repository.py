"""Protocol for reading and updating plans and their learning sessions."""

from typing import Protocol

from sessionrun.domain.common.value_objects import PlanId, PlanSessionId, PublicId, UserId
from sessionrun.domain.session.entities.plan_session import Plan, PlanSession


class LearningSessionRepositoryProtocol(Protocol):
    """Protocol for learning-session definitions and their owning plans."""

    def find_by_public_id(self, public_id: PublicId, user_id: UserId) -> PlanSession | None:
        """
        Find a learning session through a plan owned by the user.

        Returns:
            PlanSession if found and owned by user, None otherwise
        """
        ...

    def find_by_id(self, session_id: PlanSessionId) -> PlanSession | None:
        """Find a learning session by internal id."""
        ...

    def find_plan(self, plan_id: PlanId) -> Plan | None:
        """Find the plan owning a session."""
        ...

    def count_open_sessions(self, plan_id: PlanId) -> int:
        """Count sessions of a plan that are still SCHEDULED or IN_PROGRESS."""
        ...

    def save_session(self, session: PlanSession) -> PlanSession:
        """Persist status and blueprint changes of a learning session."""
        ...

    def save_plan(self, plan: Plan) -> Plan:
        """Persist status changes of a plan."""
        ...
