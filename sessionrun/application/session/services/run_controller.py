"""
Navigation entry point for a live run.

The controller owns the in-memory RunState of one run, feeds every change
through the pure reducer and persists through the autosave scheduler. All
advance decisions (gate, successor lookup, completion) are made here, never
in the reducer.
"""

from collections.abc import Callable

import structlog

from sessionrun.application.session.services.autosave_scheduler import (
    DEFAULT_AUTOSAVE_DELAY_SECONDS,
    AutosaveScheduler,
)
from sessionrun.application.session.use_cases.dtos import RunSnapshot
from sessionrun.application.session.use_cases.session_runs import (
    AbandonRunUseCase,
    CompleteRunUseCase,
    SaveProgressUseCase,
)
from sessionrun.domain.common.exceptions import InvariantViolationError
from sessionrun.domain.session.entities.blueprint import (
    Blueprint,
    ChoiceStep,
    SpeedOxStep,
    Step,
    StepType,
)
from sessionrun.domain.session.entities.session_run import ExitReason, RunStatus
from sessionrun.domain.session.services.run_state_machine import (
    ClearMatching,
    GoNext,
    GoPrev,
    RunAction,
    RunState,
    SetAnswer,
    SetCheckResult,
    SetCompleted,
    SetCompleting,
    SetFlashcardResult,
    SetFlashcardRevealed,
    SetMatchingConnection,
    SetSpeedOxAnswer,
    reduce,
)
from sessionrun.domain.session.services.step_completion_gate import StepCompletionGate
from sessionrun.domain.session.services.step_graph_resolver import Progress, StepGraphResolver
from sessionrun.domain.session.value_objects.run_inputs import FlashcardResult

logger = structlog.get_logger(__name__)

PersistSnapshot = Callable[[RunState], object]
FinalizeRun = Callable[[], object]
AbandonRun = Callable[[ExitReason], object]


class RunController:
    """Drives one run: inputs, back/forward navigation, autosave and completion."""

    def __init__(
        self,
        blueprint: Blueprint,
        state: RunState,
        persist: PersistSnapshot,
        finalize: FinalizeRun,
        abandon: AbandonRun,
        autosave_delay_seconds: float = DEFAULT_AUTOSAVE_DELAY_SECONDS,
    ) -> None:
        if blueprint.get_step(state.current_step_id) is None:
            raise InvariantViolationError(
                "RunState", f"current step {state.current_step_id} is not in the blueprint"
            )
        self.blueprint = blueprint
        self.resolver = StepGraphResolver(blueprint)
        self.gate = StepCompletionGate()
        self._state = state
        self._persist = persist
        self._finalize = finalize
        self._abandon = abandon
        self.autosave = AutosaveScheduler(self._save_snapshot, autosave_delay_seconds)

    @classmethod
    def for_run(
        cls,
        snapshot: RunSnapshot,
        user_id: int,
        save_progress_use_case: SaveProgressUseCase,
        complete_run_use_case: CompleteRunUseCase,
        abandon_run_use_case: AbandonRunUseCase,
        autosave_delay_seconds: float = DEFAULT_AUTOSAVE_DELAY_SECONDS,
    ) -> "RunController":
        """Build a controller wired to the lifecycle use cases."""
        run_id = str(snapshot.run.public_id)

        def persist(state: RunState) -> object:
            return save_progress_use_case.save_progress(
                user_id,
                run_id,
                step_index=snapshot.blueprint.index_of(state.current_step_id),
                inputs=state.inputs.to_payload(),
                step_history=list(state.step_history),
                history_index=state.history_index,
            )

        return cls(
            blueprint=snapshot.blueprint,
            state=RunState.from_run(snapshot.run),
            persist=persist,
            finalize=lambda: complete_run_use_case.complete(user_id, run_id),
            abandon=lambda reason: abandon_run_use_case.abandon(user_id, run_id, reason),
            autosave_delay_seconds=autosave_delay_seconds,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def active_step(self) -> Step:
        step = self.blueprint.get_step(self._state.current_step_id)
        if step is None:
            raise InvariantViolationError(
                "RunState", f"current step {self._state.current_step_id} is not in the blueprint"
            )
        return step

    @property
    def next_step(self) -> Step | None:
        next_id = self.resolver.resolve_next(self.active_step, self._state.inputs)
        return self.blueprint.get_step(next_id) if next_id else None

    def can_go_next(self) -> bool:
        if self._state.status is RunStatus.COMPLETED:
            return False
        return self.gate.can_advance(self.active_step, self._state.inputs) and (
            self.next_step is not None
        )

    def can_go_prev(self) -> bool:
        return self._state.is_active and self._state.history_index > 0

    def progress(self) -> Progress:
        return self.resolver.progress(self._state.current_step_id, self._state.inputs)

    # ------------------------------------------------------------------
    # Inputs on the active step
    # ------------------------------------------------------------------

    def set_answer(self, answer_index: int) -> bool:
        step = self.active_step
        changed = self._dispatch(SetAnswer(step.id, answer_index))
        if changed and isinstance(step, ChoiceStep):
            self._dispatch(SetCheckResult(step.id, step.is_correct(answer_index)))
        return self._after_input(changed)

    def reveal_flashcard(self) -> bool:
        return self._after_input(self._dispatch(SetFlashcardRevealed(self.active_step.id)))

    def set_flashcard_result(self, result: FlashcardResult) -> bool:
        action = SetFlashcardResult(self.active_step.id, FlashcardResult(result))
        return self._after_input(self._dispatch(action))

    def set_speed_ox_answer(self, answer: bool) -> bool:
        step = self.active_step
        changed = self._dispatch(SetSpeedOxAnswer(step.id, answer))
        if changed and isinstance(step, SpeedOxStep):
            self._dispatch(SetCheckResult(step.id, step.is_correct(answer)))
        return self._after_input(changed)

    def connect(self, left_id: str, right_id: str) -> bool:
        action = SetMatchingConnection(self.active_step.id, left_id, right_id)
        return self._after_input(self._dispatch(action))

    def clear_matching(self) -> bool:
        return self._after_input(self._dispatch(ClearMatching(self.active_step.id)))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_prev(self) -> bool:
        if not self.can_go_prev():
            return False
        self._dispatch(GoPrev())
        self.autosave.schedule()
        return True

    def go_next(self) -> bool:
        """
        Advance to the resolved successor of the active step.

        Returns False, with no state change, when the step's input is
        incomplete or there is no successor. Moving onto the summary step
        completes the run: the final snapshot is written and the completion
        stored before the position moves.
        """
        if self._state.status is RunStatus.COMPLETED:
            return False

        step = self.active_step
        if not self.gate.can_advance(step, self._state.inputs):
            return False

        next_id = self.resolver.resolve_next(step, self._state.inputs)
        next_step = self.blueprint.get_step(next_id) if next_id else None
        if next_step is None:
            return False

        if next_step.type is StepType.SESSION_SUMMARY:
            self._complete_into(next_step)
            return True

        if not self._state.is_active:
            return False
        self._dispatch(GoNext(next_step.id))
        self.autosave.schedule()
        return True

    def _complete_into(self, summary_step: Step) -> None:
        self._dispatch(SetCompleting())
        self.autosave.flush()
        self._finalize()
        self._dispatch(GoNext(summary_step.id))
        self._dispatch(SetCompleted())
        logger.info(
            "session_run_reached_summary",
            run_id=self._state.run_id,
            steps_visited=len(self._state.step_history),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_now(self) -> None:
        self.autosave.flush()

    def exit(self, reason: ExitReason = ExitReason.USER_EXIT) -> bool:
        """Leave the run early: flush pending input, then abandon."""
        if self._state.is_terminal:
            return False
        self.autosave.flush()
        self._abandon(ExitReason(reason))
        self._dispatch(SetCompleted())
        return True

    def close(self) -> None:
        """Write any pending change and stop the timer."""
        if self.autosave.pending:
            self.autosave.flush()
        self.autosave.cancel()

    def _save_snapshot(self) -> None:
        state = self._state
        if state.is_terminal:
            return
        self._persist(state)

    def _dispatch(self, action: RunAction) -> bool:
        new_state = reduce(self._state, action)
        if new_state is self._state:
            return False
        self._state = new_state
        return True

    def _after_input(self, changed: bool) -> bool:
        if changed:
            self.autosave.schedule()
        return changed
