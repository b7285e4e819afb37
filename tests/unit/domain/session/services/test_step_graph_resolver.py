"""Tests for StepGraphResolver."""

from sessionrun.domain.session.entities.blueprint import (
    Blueprint,
    Branch,
    BranchNext,
    CheckStep,
    ConceptStep,
    DefaultNext,
    SessionIntroStep,
    SessionSummaryStep,
)
from sessionrun.domain.session.services.step_graph_resolver import Progress, StepGraphResolver
from sessionrun.domain.session.value_objects.run_inputs import RunInputs


def _linear_blueprint() -> Blueprint:
    return Blueprint(
        blueprint_id="bp-linear",
        start_step_id="intro",
        steps=(
            SessionIntroStep(id="intro"),
            ConceptStep(id="concept", title="T", content_md="C"),
            CheckStep(id="check", question="Q", options=("a", "b"), answer_index=0),
            SessionSummaryStep(id="summary"),
        ),
    )


def _branching_blueprint() -> Blueprint:
    """check routes to remedial when wrong, otherwise skips ahead to summary."""
    return Blueprint(
        blueprint_id="bp-branch",
        start_step_id="intro",
        steps=(
            SessionIntroStep(id="intro"),
            CheckStep(
                id="check",
                question="Q",
                options=("a", "b"),
                answer_index=1,
                next=BranchNext(
                    branches=(
                        Branch(condition="incorrect", to="remedial"),
                        Branch(condition="correct", to="summary"),
                    )
                ),
            ),
            ConceptStep(
                id="remedial", title="Again", content_md="C", next=DefaultNext(to="summary")
            ),
            SessionSummaryStep(id="summary"),
        ),
    )


class TestResolveNext:
    def test_positional_successor(self) -> None:
        blueprint = _linear_blueprint()
        resolver = StepGraphResolver(blueprint)

        assert resolver.resolve_next(blueprint.start_step) == "concept"

    def test_last_step_has_no_successor(self) -> None:
        blueprint = _linear_blueprint()
        resolver = StepGraphResolver(blueprint)

        assert resolver.resolve_next(blueprint.get_step("summary")) is None  # type: ignore[arg-type]

    def test_default_next_wins(self) -> None:
        blueprint = Blueprint(
            blueprint_id="bp",
            start_step_id="intro",
            steps=(
                SessionIntroStep(id="intro", next=DefaultNext(to="summary")),
                ConceptStep(id="concept", title="T", content_md="C"),
                SessionSummaryStep(id="summary"),
            ),
        )

        assert StepGraphResolver(blueprint).resolve_next(blueprint.start_step) == "summary"

    def test_first_matching_branch_wins(self) -> None:
        blueprint = _branching_blueprint()
        resolver = StepGraphResolver(blueprint)
        check = blueprint.get_step("check")

        wrong = RunInputs().with_answer("check", 0)
        right = RunInputs().with_answer("check", 1)

        assert resolver.resolve_next(check, wrong) == "remedial"  # type: ignore[arg-type]
        assert resolver.resolve_next(check, right) == "summary"  # type: ignore[arg-type]

    def test_no_matching_branch_falls_back_to_position(self) -> None:
        blueprint = _branching_blueprint()
        resolver = StepGraphResolver(blueprint)

        # Unanswered: neither condition holds
        assert resolver.resolve_next(blueprint.get_step("check")) == "remedial"  # type: ignore[arg-type]


class TestPredictedPath:
    def test_linear_path(self) -> None:
        resolver = StepGraphResolver(_linear_blueprint())

        assert resolver.predicted_path() == ["intro", "concept", "check", "summary"]

    def test_path_follows_inputs(self) -> None:
        resolver = StepGraphResolver(_branching_blueprint())

        right = RunInputs().with_answer("check", 1)

        assert resolver.predicted_path(right) == ["intro", "check", "summary"]

    def test_cycle_terminates(self) -> None:
        blueprint = Blueprint(
            blueprint_id="bp-cycle",
            start_step_id="a",
            steps=(
                ConceptStep(id="a", title="A", content_md="A", next=DefaultNext(to="b")),
                ConceptStep(id="b", title="B", content_md="B", next=DefaultNext(to="a")),
            ),
        )

        assert StepGraphResolver(blueprint).predicted_path() == ["a", "b"]

    def test_single_step_blueprint(self) -> None:
        blueprint = Blueprint(
            blueprint_id="bp-one", start_step_id="summary", steps=(SessionSummaryStep(id="summary"),)
        )

        assert StepGraphResolver(blueprint).predicted_path() == ["summary"]


class TestProgress:
    def test_progress_along_path(self) -> None:
        resolver = StepGraphResolver(_linear_blueprint())

        assert resolver.progress("intro") == Progress(1, 4, 0)
        assert resolver.progress("concept") == Progress(2, 4, 33)
        assert resolver.progress("summary") == Progress(4, 4, 100)

    def test_step_off_path_has_zero_progress(self) -> None:
        resolver = StepGraphResolver(_branching_blueprint())
        right = RunInputs().with_answer("check", 1)

        assert resolver.progress("remedial", right) == Progress(0, 3, 0)

    def test_single_step_progress(self) -> None:
        blueprint = Blueprint(
            blueprint_id="bp-one", start_step_id="summary", steps=(SessionSummaryStep(id="summary"),)
        )

        assert StepGraphResolver(blueprint).progress("summary") == Progress(1, 1, 0)
