"""Session module domain exceptions."""

from sessionrun.domain.common.exceptions import BusinessRuleViolationError, ValidationError


class InvalidBlueprintError(ValidationError):
    """Raised when a blueprint document is structurally unusable."""

    def __init__(self, message: str, field: str | None = None, value: object = None) -> None:
        super().__init__(f"Invalid blueprint: {message}", field=field, value=value)


class InvalidStepInputError(ValidationError):
    """Raised when a progress payload does not have the expected input shape."""

    code = "INVALID_STEP_INPUT"


class InvalidRunTransitionError(BusinessRuleViolationError):
    """Raised when a run lifecycle transition would move backwards."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            "run_status_monotonic",
            f"Cannot move session run from {current} to {target}",
        )
        self.current = current
        self.target = target
