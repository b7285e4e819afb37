"""
Run state machine.

`reduce(state, action)` is a pure function: it never mutates the given
state and returns the same instance when an action is refused. The caller
decides whether an advance is allowed (see RunController); the reducer
only enforces status rules and keeps the history invariant.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Self

from sessionrun.domain.session.entities.session_run import RunStatus
from sessionrun.domain.session.value_objects.run_inputs import FlashcardResult, RunInputs

if TYPE_CHECKING:
    from sessionrun.domain.session.entities.session_run import SessionRun


@dataclass(frozen=True)
class RunState:
    """Snapshot of a run as seen by the navigation layer."""

    run_id: str
    status: RunStatus
    step_history: tuple[str, ...]
    history_index: int
    inputs: RunInputs = field(default_factory=RunInputs)
    # UI feedback only, never persisted
    check_results: Mapping[str, bool] = field(default_factory=dict)

    @property
    def current_step_id(self) -> str:
        return self.step_history[self.history_index]

    @property
    def is_active(self) -> bool:
        return self.status is RunStatus.ACTIVE

    @property
    def is_terminal(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @classmethod
    def from_run(cls, run: "SessionRun") -> Self:
        """Rehydrate from a stored run, clamping a stale history index."""
        history = tuple(run.step_history)
        index = min(max(run.history_index, 0), len(history) - 1)
        return cls(
            run_id=str(run.public_id),
            status=run.status,
            step_history=history,
            history_index=index,
            inputs=run.inputs,
        )


# ----------------------------------------------------------------------
# Actions
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class SetAnswer:
    step_id: str
    answer_index: int


@dataclass(frozen=True)
class SetFlashcardRevealed:
    step_id: str
    revealed: bool = True


@dataclass(frozen=True)
class SetFlashcardResult:
    step_id: str
    result: FlashcardResult


@dataclass(frozen=True)
class SetSpeedOxAnswer:
    step_id: str
    answer: bool


@dataclass(frozen=True)
class SetMatchingConnection:
    step_id: str
    left_id: str
    right_id: str


@dataclass(frozen=True)
class ClearMatching:
    step_id: str


@dataclass(frozen=True)
class SetCheckResult:
    step_id: str
    correct: bool


@dataclass(frozen=True)
class GoPrev:
    pass


@dataclass(frozen=True)
class GoNext:
    next_step_id: str


@dataclass(frozen=True)
class SetCompleting:
    pass


@dataclass(frozen=True)
class SetCompleted:
    pass


InputAction = (
    SetAnswer
    | SetFlashcardRevealed
    | SetFlashcardResult
    | SetSpeedOxAnswer
    | SetMatchingConnection
    | ClearMatching
    | SetCheckResult
)
RunAction = InputAction | GoPrev | GoNext | SetCompleting | SetCompleted

_INPUT_ACTIONS = (
    SetAnswer,
    SetFlashcardRevealed,
    SetFlashcardResult,
    SetSpeedOxAnswer,
    SetMatchingConnection,
    ClearMatching,
    SetCheckResult,
)


def _apply_input(state: RunState, action: InputAction) -> RunState:
    inputs = state.inputs
    match action:
        case SetAnswer(step_id, answer_index):
            inputs = inputs.with_answer(step_id, answer_index)
        case SetFlashcardRevealed(step_id, revealed):
            inputs = inputs.with_flashcard_revealed(step_id, revealed)
        case SetFlashcardResult(step_id, result):
            inputs = inputs.with_flashcard_result(step_id, result)
        case SetSpeedOxAnswer(step_id, answer):
            inputs = inputs.with_speed_ox_answer(step_id, answer)
        case SetMatchingConnection(step_id, left_id, right_id):
            inputs = inputs.with_matching_connection(step_id, left_id, right_id)
        case ClearMatching(step_id):
            inputs = inputs.without_matching(step_id)
        case SetCheckResult(step_id, correct):
            return replace(state, check_results={**state.check_results, step_id: correct})
    return replace(state, inputs=inputs)


def reduce(state: RunState, action: RunAction) -> RunState:
    """Apply one action to a run state.

    Status rules:
    - COMPLETED refuses everything
    - input actions and GoPrev need ACTIVE
    - GoNext is allowed while ACTIVE or COMPLETING (the move onto the summary)
    - SetCompleting only from ACTIVE, SetCompleted from ACTIVE or COMPLETING
    """
    if state.is_terminal:
        return state

    if isinstance(action, _INPUT_ACTIONS):
        if not state.is_active:
            return state
        return _apply_input(state, action)

    match action:
        case GoPrev():
            if not state.is_active or state.history_index == 0:
                return state
            return replace(state, history_index=state.history_index - 1)
        case GoNext(next_step_id):
            history = state.step_history[: state.history_index + 1] + (next_step_id,)
            return replace(state, step_history=history, history_index=len(history) - 1)
        case SetCompleting():
            if not state.is_active:
                return state
            return replace(state, status=RunStatus.COMPLETING)
        case SetCompleted():
            return replace(state, status=RunStatus.COMPLETED)

    return state
