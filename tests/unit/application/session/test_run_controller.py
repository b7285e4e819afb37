"""Tests for RunController navigation, autosave and completion."""

from collections.abc import Generator

import pytest

from sessionrun.application.session.services.run_controller import RunController
from sessionrun.domain.common.exceptions import InvariantViolationError
from sessionrun.domain.session.entities.blueprint import (
    Blueprint,
    Branch,
    BranchNext,
    CheckStep,
    ConceptStep,
    DefaultNext,
    FlashcardStep,
    SessionIntroStep,
    SessionSummaryStep,
    SpeedOxStep,
)
from sessionrun.domain.session.entities.session_run import ExitReason, RunStatus
from sessionrun.domain.session.services.run_state_machine import RunState
from sessionrun.domain.session.value_objects.run_inputs import FlashcardResult

# Long enough that no deferred save fires during a test
NEVER = 600.0


class Recorder:
    """Collects calls to the controller's persistence callbacks."""

    def __init__(self) -> None:
        self.persisted: list[RunState] = []
        self.finalized = 0
        self.abandoned: list[ExitReason] = []
        self.log: list[str] = []

    def persist(self, state: RunState) -> None:
        self.persisted.append(state)
        self.log.append("persist")

    def finalize(self) -> None:
        self.finalized += 1
        self.log.append("finalize")

    def abandon(self, reason: ExitReason) -> None:
        self.abandoned.append(reason)
        self.log.append("abandon")


def _linear_blueprint() -> Blueprint:
    return Blueprint(
        blueprint_id="bp-linear",
        start_step_id="intro",
        steps=(
            SessionIntroStep(id="intro"),
            CheckStep(id="check", question="Q", options=("a", "b"), answer_index=1),
            FlashcardStep(id="card", front="F", back="B"),
            SessionSummaryStep(id="summary"),
        ),
    )


def _branching_blueprint() -> Blueprint:
    return Blueprint(
        blueprint_id="bp-branch",
        start_step_id="intro",
        steps=(
            SessionIntroStep(id="intro"),
            SpeedOxStep(
                id="ox",
                statement="S",
                is_true=True,
                next=BranchNext(
                    branches=(
                        Branch(condition="incorrect", to="remedial"),
                        Branch(condition="always", to="deep"),
                    )
                ),
            ),
            ConceptStep(
                id="remedial", title="R", content_md="R", next=DefaultNext(to="summary")
            ),
            ConceptStep(id="deep", title="D", content_md="D"),
            SessionSummaryStep(id="summary"),
        ),
    )


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


def _make_controller(
    recorder: Recorder, blueprint: Blueprint, history: tuple[str, ...] = ("intro",)
) -> RunController:
    state = RunState(
        run_id="run-abcdef",
        status=RunStatus.ACTIVE,
        step_history=history,
        history_index=len(history) - 1,
    )
    return RunController(
        blueprint=blueprint,
        state=state,
        persist=recorder.persist,
        finalize=recorder.finalize,
        abandon=recorder.abandon,
        autosave_delay_seconds=NEVER,
    )


@pytest.fixture
def controller(recorder: Recorder) -> Generator[RunController, None, None]:
    run_controller = _make_controller(recorder, _linear_blueprint())
    yield run_controller
    run_controller.autosave.cancel()


class TestRunController:
    def test_linear_run_to_completion(
        self, controller: RunController, recorder: Recorder
    ) -> None:
        assert controller.go_next()
        assert controller.active_step.id == "check"

        # Gate: unanswered check blocks
        assert not controller.can_go_next()
        assert not controller.go_next()
        assert controller.active_step.id == "check"

        controller.set_answer(0)
        assert controller.state.check_results == {"check": False}
        assert controller.go_next()

        controller.reveal_flashcard()
        assert not controller.go_next()
        controller.set_flashcard_result(FlashcardResult.KNOW)
        assert controller.next_step.id == "summary"  # type: ignore[union-attr]

        assert controller.go_next()

        assert controller.state.status is RunStatus.COMPLETED
        assert controller.active_step.id == "summary"
        assert recorder.finalized == 1
        # Pending input is written before completion is stored
        assert recorder.log == ["persist", "finalize"]
        assert recorder.persisted[-1].current_step_id == "card"
        assert recorder.persisted[-1].inputs.flashcard_result == {"card": FlashcardResult.KNOW}

    def test_completion_happens_once(self, controller: RunController, recorder: Recorder) -> None:
        controller.go_next()
        controller.set_answer(1)
        controller.go_next()
        controller.reveal_flashcard()
        controller.set_flashcard_result(FlashcardResult.DONT_KNOW)
        controller.go_next()

        assert not controller.go_next()
        assert not controller.can_go_next()
        assert not controller.go_prev()
        assert not controller.set_answer(0)
        assert recorder.finalized == 1

    def test_inputs_schedule_autosave(self, controller: RunController) -> None:
        controller.go_next()
        controller.autosave.cancel()

        assert controller.set_answer(1)

        assert controller.autosave.pending

    def test_save_now_flushes(self, controller: RunController, recorder: Recorder) -> None:
        controller.go_next()
        controller.set_answer(1)

        controller.save_now()

        assert not controller.autosave.pending
        assert recorder.persisted[-1].inputs.answers == {"check": 1}

    def test_back_then_new_branch_truncates_history(self, recorder: Recorder) -> None:
        controller = _make_controller(recorder, _branching_blueprint())
        controller.go_next()
        controller.set_speed_ox_answer(False)
        assert controller.state.check_results == {"ox": False}
        controller.go_next()
        assert controller.active_step.id == "remedial"

        assert controller.go_prev()
        assert controller.active_step.id == "ox"
        assert controller.state.step_history == ("intro", "ox", "remedial")

        controller.set_speed_ox_answer(True)
        controller.go_next()

        assert controller.state.step_history == ("intro", "ox", "deep")
        controller.autosave.cancel()

    def test_progress_follows_predicted_path(self, recorder: Recorder) -> None:
        controller = _make_controller(recorder, _branching_blueprint(), ("intro", "ox"))
        controller.set_speed_ox_answer(False)

        progress = controller.progress()

        assert progress.total_steps == 4
        assert progress.current_step_number == 2
        controller.autosave.cancel()

    def test_exit_flushes_then_abandons(
        self, controller: RunController, recorder: Recorder
    ) -> None:
        controller.go_next()
        controller.set_answer(1)

        assert controller.exit(ExitReason.NETWORK)

        assert recorder.log == ["persist", "abandon"]
        assert recorder.persisted[-1].inputs.answers == {"check": 1}
        assert recorder.abandoned == [ExitReason.NETWORK]
        assert controller.state.is_terminal
        assert not controller.exit()

    def test_close_writes_pending_change(
        self, controller: RunController, recorder: Recorder
    ) -> None:
        controller.go_next()

        controller.close()

        assert len(recorder.persisted) == 1
        assert not controller.autosave.pending

    def test_state_outside_blueprint_is_rejected(self, recorder: Recorder) -> None:
        with pytest.raises(InvariantViolationError):
            _make_controller(recorder, _linear_blueprint(), ("ghost",))
