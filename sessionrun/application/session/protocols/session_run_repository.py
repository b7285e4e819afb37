"""Protocol for SessionRun repository."""

from typing import Protocol

from sessionrun.domain.common.value_objects import PlanSessionId, PublicId, UserId
from sessionrun.domain.session.entities.session_run import SessionRun


class SessionRunRepositoryProtocol(Protocol):
    """Protocol for SessionRun persistence operations."""

    def find_by_public_id(self, public_id: PublicId, user_id: UserId) -> SessionRun | None:
        """
        Find a run by its public id with user ownership check.

        Args:
            public_id: The run's public id
            user_id: The user ID for ownership verification

        Returns:
            SessionRun if found and owned by user, None otherwise
        """
        ...

    def find_active(self, user_id: UserId, session_id: PlanSessionId) -> SessionRun | None:
        """
        Find the non-terminal run of a user for a learning session.

        Returns:
            The ACTIVE or COMPLETING run, None if there is none
        """
        ...

    def find_by_idempotency_key(self, user_id: UserId, idempotency_key: str) -> SessionRun | None:
        """Find the run a user started with the given idempotency key."""
        ...

    def save(self, run: SessionRun) -> SessionRun:
        """
        Save a run (create or update).

        Args:
            run: The run to save

        Returns:
            Saved run with database-generated values

        Raises:
            ConcurrentRunExistsError: If inserting would create a second
                non-terminal run, or reuse an idempotency key
        """
        ...

    def save_progress(self, run: SessionRun) -> bool:
        """
        Write position and inputs only, and only while the run is not completed.

        Returns:
            True if the run was written, False if it is already completed
        """
        ...
