"""Tests for the SessionRun aggregate."""

from datetime import UTC, datetime, timedelta

import pytest

from sessionrun.domain.common.exceptions import InvariantViolationError
from sessionrun.domain.common.value_objects import (
    PlanId,
    PlanSessionId,
    PublicId,
    SessionRunId,
    UserId,
)
from sessionrun.domain.session.entities.session_run import ExitReason, RunStatus, SessionRun
from sessionrun.domain.session.events import (
    SessionRunAbandoned,
    SessionRunCompleted,
    SessionRunStarted,
)
from sessionrun.domain.session.exceptions import InvalidRunTransitionError
from sessionrun.domain.session.value_objects.run_inputs import RunInputs

STARTED_AT = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _make_run(**overrides: object) -> SessionRun:
    values: dict[str, object] = {
        "id": SessionRunId(7),
        "public_id": PublicId("run-abcdef"),
        "session_id": PlanSessionId(3),
        "user_id": UserId(1),
        "plan_id": PlanId(2),
        "blueprint_id": "bp-1",
        "step_history": ["intro", "concept"],
        "history_index": 1,
        "inputs": RunInputs.empty(),
        "status": RunStatus.ACTIVE,
        "started_at": STARTED_AT,
    }
    values.update(overrides)
    return SessionRun.create_with_id(**values)  # type: ignore[arg-type]


class TestSessionRunCreation:
    def test_create_starts_on_start_step(self) -> None:
        run = SessionRun.create(
            user_id=UserId(1),
            session_id=PlanSessionId(3),
            plan_id=PlanId(2),
            blueprint_id="bp-1",
            start_step_id="intro",
            idempotency_key="key-1",
        )

        assert run.id.is_transient
        assert run.step_history == ["intro"]
        assert run.current_step_id == "intro"
        assert run.status is RunStatus.ACTIVE
        assert run.inputs.is_empty
        events = run.collect_events()
        assert len(events) == 1
        assert isinstance(events[0], SessionRunStarted)

    def test_empty_history_violates_invariant(self) -> None:
        with pytest.raises(InvariantViolationError):
            _make_run(step_history=[], history_index=0)

    def test_index_outside_history_violates_invariant(self) -> None:
        with pytest.raises(InvariantViolationError):
            _make_run(history_index=2)


class TestSessionRunProgress:
    def test_record_progress_replaces_position_and_inputs(self) -> None:
        run = _make_run()
        inputs = RunInputs().with_answer("check", 0)

        run.record_progress(["intro", "concept", "check"], 2, inputs)

        assert run.current_step_id == "check"
        assert run.inputs == inputs

    def test_record_progress_rejects_bad_position(self) -> None:
        run = _make_run()

        with pytest.raises(InvariantViolationError):
            run.record_progress(["intro"], 3, RunInputs())

        assert run.step_history == ["intro", "concept"]

    def test_completed_run_refuses_progress(self) -> None:
        run = _make_run(status=RunStatus.COMPLETED)

        with pytest.raises(InvalidRunTransitionError):
            run.record_progress(["intro"], 0, RunInputs())


class TestSessionRunLifecycle:
    def test_complete_records_event_once(self) -> None:
        run = _make_run()
        ended_at = STARTED_AT + timedelta(minutes=12, seconds=40)

        assert run.complete(now=ended_at) is True
        assert run.complete() is False

        assert run.status is RunStatus.COMPLETED
        assert run.ended_at == ended_at
        events = run.collect_events()
        assert len(events) == 1
        assert isinstance(events[0], SessionRunCompleted)
        assert events[0].duration_minutes == 12

    def test_abandon_marks_terminal_with_reason(self) -> None:
        run = _make_run()

        assert run.abandon(ExitReason.TIMEOUT) is True

        assert run.is_terminal
        assert run.is_abandoned
        assert run.exit_reason is ExitReason.TIMEOUT
        assert isinstance(run.collect_events()[0], SessionRunAbandoned)

    def test_abandon_after_completion_is_noop(self) -> None:
        run = _make_run()
        run.complete()

        assert run.abandon(ExitReason.USER_EXIT) is False
        assert run.exit_reason is None
        assert not run.is_abandoned

    def test_mark_recovered(self) -> None:
        run = _make_run()

        run.mark_recovered()

        assert run.is_recovery
        assert run.current_step_id == "concept"
