"""Tests for session run use cases against in-memory repositories."""

import threading
from dataclasses import replace
from itertools import count

import pytest

from sessionrun.application.session.services.run_controller import RunController
from sessionrun.application.session.services.session_summary_writer import SessionSummaryWriter
from sessionrun.application.session.use_cases.session_runs import (
    AbandonRunUseCase,
    CompleteRunUseCase,
    CreateOrResumeRunUseCase,
    GetRunUseCase,
    SaveProgressUseCase,
)
from sessionrun.domain.common.value_objects import (
    PlanId,
    PlanSessionId,
    PublicId,
    SessionRunId,
    UserId,
)
from sessionrun.domain.session.entities.blueprint import (
    Blueprint,
    CheckStep,
    SessionIntroStep,
    SessionSummaryStep,
)
from sessionrun.domain.session.entities.plan_session import (
    Plan,
    PlanSession,
    PlanStatus,
    SessionStatus,
)
from sessionrun.domain.session.entities.session_run import RunStatus, SessionRun
from sessionrun.domain.session.entities.session_summary import SessionSummary
from sessionrun.domain.session.events import SessionRunCompleted
from sessionrun.exceptions import (
    ConcurrentRunExistsError,
    RunNotFoundError,
    ValidationError,
)

USER_ID = 1


class FakeRunRepository:
    def __init__(self) -> None:
        self.runs: dict[int, SessionRun] = {}
        self._ids = count(1)
        self.saves = 0
        # Simulates another request inserting first
        self.concurrent_winner: SessionRun | None = None

    def find_by_public_id(self, public_id: PublicId, user_id: UserId) -> SessionRun | None:
        for run in self.runs.values():
            if run.public_id == public_id and run.user_id == user_id:
                return self._copy(run)
        return None

    def find_active(self, user_id: UserId, session_id: PlanSessionId) -> SessionRun | None:
        for run in self.runs.values():
            if run.user_id == user_id and run.session_id == session_id and not run.is_terminal:
                return self._copy(run)
        return None

    def find_by_idempotency_key(self, user_id: UserId, idempotency_key: str) -> SessionRun | None:
        for run in self.runs.values():
            if run.user_id == user_id and run.idempotency_key == idempotency_key:
                return self._copy(run)
        return None

    def save(self, run: SessionRun) -> SessionRun:
        self.saves += 1
        if run.id.is_transient:
            if self.concurrent_winner is not None:
                winner, self.concurrent_winner = self.concurrent_winner, None
                self.runs[winner.id.value] = winner
                raise ConcurrentRunExistsError
            run = replace(run, id=SessionRunId(next(self._ids)))
        self.runs[run.id.value] = self._copy(run)
        return self._copy(run)

    def save_progress(self, run: SessionRun) -> bool:
        self.saves += 1
        stored = self.runs.get(run.id.value)
        if stored is None or stored.is_terminal:
            return False
        self.runs[run.id.value] = replace(
            stored,
            step_history=list(run.step_history),
            history_index=run.history_index,
            inputs=run.inputs,
            updated_at=run.updated_at,
            _events=[],
        )
        return True

    @staticmethod
    def _copy(run: SessionRun) -> SessionRun:
        return replace(run, step_history=list(run.step_history), _events=[])


class FakeLearningSessionRepository:
    def __init__(self, plan: Plan, sessions: list[PlanSession]) -> None:
        self.plan = plan
        self.sessions = {session.id.value: session for session in sessions}

    def find_by_public_id(self, public_id: PublicId, user_id: UserId) -> PlanSession | None:
        if user_id != self.plan.user_id:
            return None
        for session in self.sessions.values():
            if session.public_id == public_id:
                return replace(session)
        return None

    def find_by_id(self, session_id: PlanSessionId) -> PlanSession | None:
        session = self.sessions.get(session_id.value)
        return replace(session) if session else None

    def find_plan(self, plan_id: PlanId) -> Plan | None:
        return replace(self.plan) if plan_id == self.plan.id else None

    def count_open_sessions(self, plan_id: PlanId) -> int:
        return sum(1 for session in self.sessions.values() if session.is_open)

    def save_session(self, session: PlanSession) -> PlanSession:
        self.sessions[session.id.value] = replace(session)
        return session

    def save_plan(self, plan: Plan) -> Plan:
        self.plan = replace(plan)
        return plan


class FakeBlueprintProvider:
    def __init__(self, *blueprints: Blueprint) -> None:
        self.blueprints = {blueprint.blueprint_id: blueprint for blueprint in blueprints}

    def get_blueprint(self, blueprint_id: str) -> Blueprint | None:
        return self.blueprints.get(blueprint_id)

    def save(self, blueprint: Blueprint) -> Blueprint:
        return self.blueprints.setdefault(blueprint.blueprint_id, blueprint)


class FakeSummaryRepository:
    def __init__(self) -> None:
        self.summaries: dict[int, SessionSummary] = {}

    def find_by_run(self, run_id: SessionRunId) -> SessionSummary | None:
        return self.summaries.get(run_id.value)

    def save(self, summary: SessionSummary) -> SessionSummary:
        return self.summaries.setdefault(summary.run_id.value, summary)


class RecordingNotifier:
    def __init__(self) -> None:
        self.events: list[SessionRunCompleted] = []

    def notify(self, event: SessionRunCompleted) -> None:
        self.events.append(event)


class FailingNotifier:
    def notify(self, event: SessionRunCompleted) -> None:
        raise RuntimeError("downstream unavailable")


def _make_blueprint() -> Blueprint:
    return Blueprint(
        blueprint_id="bp-1",
        start_step_id="intro",
        steps=(
            SessionIntroStep(id="intro"),
            CheckStep(id="check", question="Q", options=("a", "b"), answer_index=0),
            SessionSummaryStep(id="summary"),
        ),
    )


class Harness:
    """Use cases wired to shared in-memory repositories."""

    def __init__(self, blueprint_id: str | None = "bp-1") -> None:
        self.plan = Plan(id=PlanId(1), user_id=UserId(USER_ID), title="Plan")
        self.session = PlanSession(
            id=PlanSessionId(10),
            public_id=PublicId("sess-one"),
            plan_id=self.plan.id,
            title="Closures",
            blueprint_id=blueprint_id,
        )
        self.runs = FakeRunRepository()
        self.learning = FakeLearningSessionRepository(self.plan, [self.session])
        self.blueprints = FakeBlueprintProvider(_make_blueprint())
        self.summaries = FakeSummaryRepository()
        self.notifier = RecordingNotifier()

        self.create = CreateOrResumeRunUseCase(self.runs, self.learning, self.blueprints)
        self.get = GetRunUseCase(self.runs, self.blueprints, self.summaries)
        self.save = SaveProgressUseCase(self.runs, self.blueprints)
        self.complete = CompleteRunUseCase(
            self.runs,
            self.learning,
            notifiers=[
                FailingNotifier(),
                SessionSummaryWriter(self.summaries, self.learning),
                self.notifier,
            ],
        )
        self.abandon = AbandonRunUseCase(self.runs, self.learning)

    def start(self, idempotency_key: str | None = None) -> str:
        result = self.create.create_or_resume(USER_ID, "sess-one", idempotency_key)
        return str(result.run.public_id)


@pytest.fixture
def harness() -> Harness:
    return Harness()


class TestCreateOrResume:
    def test_concurrent_insert_becomes_resume(self, harness: Harness) -> None:
        winner = SessionRun.create(
            user_id=UserId(USER_ID),
            session_id=harness.session.id,
            plan_id=harness.plan.id,
            blueprint_id="bp-1",
            start_step_id="intro",
        )
        harness.runs.concurrent_winner = replace(winner, id=SessionRunId(99))

        result = harness.create.create_or_resume(USER_ID, "sess-one")

        assert result.created is False
        assert result.run.id == SessionRunId(99)
        assert len(harness.runs.runs) == 1

    def test_concurrent_insert_with_key_returns_keyed_run(self, harness: Harness) -> None:
        winner = SessionRun.create(
            user_id=UserId(USER_ID),
            session_id=harness.session.id,
            plan_id=harness.plan.id,
            blueprint_id="bp-1",
            start_step_id="intro",
            idempotency_key="double-click",
        )
        harness.runs.concurrent_winner = replace(winner, id=SessionRunId(42))

        result = harness.create.create_or_resume(USER_ID, "sess-one", "double-click")

        assert result.run.id == SessionRunId(42)

    def test_resume_does_not_reset_progress(self, harness: Harness) -> None:
        run_id = harness.start()
        harness.save.save_progress(
            USER_ID, run_id, 1, {"answers": {"check": 1}}, step_history=["intro", "check"]
        )

        result = harness.create.create_or_resume(USER_ID, "sess-one")

        assert result.is_recovery is True
        assert result.run.current_step_id == "check"
        assert result.run.inputs.answers == {"check": 1}

    def test_template_blueprint_is_reused(self) -> None:
        harness = Harness(blueprint_id=None)

        run_id = harness.start()
        harness.abandon.abandon(USER_ID, run_id)
        second = harness.start()

        first_run = harness.get.get_run(USER_ID, run_id).run
        second_run = harness.get.get_run(USER_ID, second).run
        assert first_run.blueprint_id == second_run.blueprint_id == "template-sess-one"
        assert harness.learning.sessions[10].blueprint_id == "template-sess-one"


class TestSaveProgress:
    def test_step_index_out_of_range_keeps_position(self, harness: Harness) -> None:
        run_id = harness.start()

        result = harness.save.save_progress(USER_ID, run_id, 17, {"answers": {"check": 0}})

        assert result.saved is True
        run = harness.get.get_run(USER_ID, run_id).run
        assert run.step_history == ["intro"]
        assert run.inputs.answers == {"check": 0}

    def test_history_index_out_of_range_keeps_position(self, harness: Harness) -> None:
        run_id = harness.start()

        harness.save.save_progress(
            USER_ID, run_id, None, None, step_history=["intro", "check"], history_index=5
        )

        assert harness.get.get_run(USER_ID, run_id).run.step_history == ["intro"]

    def test_malformed_payload_writes_nothing(self, harness: Harness) -> None:
        run_id = harness.start()
        saves_before = harness.runs.saves

        result = harness.save.save_progress(USER_ID, run_id, 1, {"answers": "all of them"})

        assert result.saved is False
        assert harness.runs.saves == saves_before

    def test_unknown_run(self, harness: Harness) -> None:
        with pytest.raises(RunNotFoundError):
            harness.save.save_progress(USER_ID, "nope-nope", 0, None)


class TestCompleteRun:
    def test_notifier_failure_does_not_fail_completion(self, harness: Harness) -> None:
        run_id = harness.start()

        result = harness.complete.complete(USER_ID, run_id)

        assert result.already_completed is False
        assert result.run.status is RunStatus.COMPLETED
        assert len(harness.notifier.events) == 1
        assert harness.learning.sessions[10].status is SessionStatus.COMPLETED
        assert harness.learning.plan.status is PlanStatus.COMPLETED

    def test_completion_event_dispatched_once(self, harness: Harness) -> None:
        run_id = harness.start()

        harness.complete.complete(USER_ID, run_id)
        second = harness.complete.complete(USER_ID, run_id)

        assert second.already_completed is True
        assert len(harness.notifier.events) == 1
        assert len(harness.summaries.summaries) == 1

    def test_snapshot_includes_summary(self, harness: Harness) -> None:
        run_id = harness.start()
        harness.complete.complete(USER_ID, run_id)

        snapshot = harness.get.get_run(USER_ID, run_id)

        assert snapshot.summary is not None
        assert snapshot.summary.summary_md.startswith("**Closures** completed in")


class TestAbandonRun:
    def test_unknown_reason_is_rejected(self, harness: Harness) -> None:
        run_id = harness.start()

        with pytest.raises(ValidationError):
            harness.abandon.abandon(USER_ID, run_id, "BORED")

    def test_abandon_returns_session_to_scheduled(self, harness: Harness) -> None:
        run_id = harness.start()
        assert harness.learning.sessions[10].status is SessionStatus.IN_PROGRESS

        result = harness.abandon.abandon(USER_ID, run_id, "TIMEOUT")

        assert result.status == "ABANDONED"
        assert harness.learning.sessions[10].status is SessionStatus.SCHEDULED
        assert harness.get.get_run(USER_ID, run_id).run.is_abandoned


class TestRunControllerWiring:
    def test_controller_drives_use_cases(self, harness: Harness) -> None:
        run_id = harness.start()
        snapshot = harness.get.get_run(USER_ID, run_id)
        controller = RunController.for_run(
            snapshot,
            USER_ID,
            harness.save,
            harness.complete,
            harness.abandon,
            autosave_delay_seconds=600,
        )

        controller.go_next()
        controller.set_answer(1)
        controller.go_next()

        stored = harness.get.get_run(USER_ID, run_id)
        assert stored.run.status is RunStatus.COMPLETED
        assert stored.run.step_history == ["intro", "check"]
        assert stored.run.inputs.answers == {"check": 1}
        assert controller.active_step.id == "summary"

    def test_completion_waits_for_running_autosave(
        self, harness: Harness, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        run_id = harness.start()
        snapshot = harness.get.get_run(USER_ID, run_id)
        controller = RunController.for_run(
            snapshot,
            USER_ID,
            harness.save,
            harness.complete,
            harness.abandon,
            autosave_delay_seconds=0.05,
        )
        test_thread = threading.current_thread()
        timer_save_loaded = threading.Event()
        release_timer_save = threading.Event()
        write_progress = harness.runs.save_progress

        def slow_timer_write(run: SessionRun) -> bool:
            if threading.current_thread() is not test_thread:
                # The timer save has loaded the ACTIVE run and is mid-write
                timer_save_loaded.set()
                release_timer_save.wait(2.0)
            return write_progress(run)

        monkeypatch.setattr(harness.runs, "save_progress", slow_timer_write)

        controller.go_next()
        assert timer_save_loaded.wait(2.0)
        threading.Timer(0.1, release_timer_save.set).start()
        controller.set_answer(1)
        controller.go_next()

        stored = harness.get.get_run(USER_ID, run_id)
        assert stored.run.status is RunStatus.COMPLETED
        assert stored.run.inputs.answers == {"check": 1}
        assert not controller.autosave.pending
