"""Custom exception hierarchy for the session-run service."""

from starlette import status


class SessionRunError(Exception):
    """Base exception for all session-run errors."""

    code: str = "INTERNAL_ERROR"

    def __init__(
        self, message: str, status_code: int = 500, code: str | None = None
    ) -> None:
        """Initialize exception with message, status code and error code."""
        self.message = message
        self.status_code = status_code
        if code is not None:
            self.code = code
        super().__init__(self.message)


class NotFoundError(SessionRunError):
    """Resource not found error."""

    code = "NOT_FOUND"

    def __init__(self, message: str) -> None:
        """Initialize with message and 404 status code."""
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class SessionNotFoundError(NotFoundError):
    """Learning session not found (or not owned by the user)."""

    code = "NOT_FOUND_SESSION"

    def __init__(self, session_id: str | None = None, *, message: str | None = None) -> None:
        """Initialize with session ID or custom message."""
        self.session_id = session_id
        if message:
            super().__init__(message)
        elif session_id is not None:
            super().__init__(f"Learning session {session_id} not found")
        else:
            super().__init__("Learning session not found")


class RunNotFoundError(NotFoundError):
    """Session run not found (or not owned by the user)."""

    code = "NOT_FOUND_RUN"

    def __init__(self, run_id: str | None = None, *, message: str | None = None) -> None:
        """Initialize with run ID or custom message."""
        self.run_id = run_id
        if message:
            super().__init__(message)
        elif run_id is not None:
            super().__init__(f"Session run {run_id} not found")
        else:
            super().__init__("Session run not found")


class BlueprintNotFoundError(NotFoundError):
    """A session references a blueprint that no longer exists."""

    code = "NOT_FOUND_BLUEPRINT"

    def __init__(self, blueprint_id: str) -> None:
        self.blueprint_id = blueprint_id
        super().__init__(f"Blueprint {blueprint_id} not found")


class PlanNotActiveError(SessionRunError):
    """The plan owning the session is paused, archived or finished."""

    code = "PLAN_NOT_ACTIVE"

    def __init__(self, plan_status: str) -> None:
        self.plan_status = plan_status
        super().__init__(
            f"Plan is {plan_status}; sessions can only be started in an active plan",
            status_code=status.HTTP_409_CONFLICT,
        )


class SessionAlreadyCompletedError(SessionRunError):
    """The learning session has already been completed."""

    code = "SESSION_ALREADY_COMPLETED"

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(
            f"Learning session {session_id} is already completed",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class SessionNotStartableError(SessionRunError):
    """The learning session was skipped or canceled."""

    code = "SESSION_NOT_STARTABLE"

    def __init__(self, session_id: str, session_status: str) -> None:
        self.session_id = session_id
        self.session_status = session_status
        super().__init__(
            f"Learning session {session_id} is {session_status} and cannot be started",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class IdempotencyKeyConflictError(SessionRunError):
    """The idempotency key was already used to start a different session."""

    code = "IDEMPOTENCY_KEY_CONFLICT"

    def __init__(self, idempotency_key: str) -> None:
        self.idempotency_key = idempotency_key
        super().__init__(
            "Idempotency key was already used for another session",
            status_code=status.HTTP_409_CONFLICT,
        )


class ConcurrentRunExistsError(SessionRunError):
    """
    A concurrent start already inserted a run for this user and session.

    Raised by the repository when the uniqueness constraint rejects an
    insert; the create-or-resume use case turns it into a resume.
    """

    code = "CONCURRENT_RUN_EXISTS"

    def __init__(self, message: str = "An active run already exists for this session") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class ValidationError(SessionRunError):
    """Validation error."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(message, status_code=status_code)

