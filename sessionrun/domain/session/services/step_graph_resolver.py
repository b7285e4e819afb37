"""Domain service for walking a blueprint's step graph."""

from dataclasses import dataclass

from sessionrun.domain.session.entities.blueprint import (
    Blueprint,
    BranchNext,
    DefaultNext,
    Step,
)
from sessionrun.domain.session.services.branch_conditions import condition_matches
from sessionrun.domain.session.value_objects.run_inputs import RunInputs


@dataclass(frozen=True)
class Progress:
    """Position of a step on the predicted path."""

    current_step_number: int
    total_steps: int
    percent: int


class StepGraphResolver:
    """Resolves successors and the predicted path through a blueprint.

    Successor rules, in order:
    1. A default `next` wins unconditionally
    2. Otherwise the first branch whose condition matches
    3. Otherwise the positional successor in the step list (None at the end)
    """

    def __init__(self, blueprint: Blueprint) -> None:
        self.blueprint = blueprint

    def resolve_next(self, step: Step, inputs: RunInputs | None = None) -> str | None:
        """Return the id of the step that follows `step`, or None if it is the last."""
        inputs = inputs or RunInputs.empty()

        if isinstance(step.next, DefaultNext):
            return step.next.to
        if isinstance(step.next, BranchNext):
            for branch in step.next.branches:
                if condition_matches(branch.condition, step, inputs):
                    return branch.to

        following = self.blueprint.step_after(step.id)
        return following.id if following else None

    def predicted_path(self, inputs: RunInputs | None = None) -> list[str]:
        """
        Follow successors from the start step.

        Stops at the end of the graph, on an unknown id, or on the first
        repeated id, so cyclic blueprints still terminate. Always contains
        at least the start step.
        """
        path: list[str] = []
        seen: set[str] = set()
        step: Step | None = self.blueprint.start_step

        while step is not None and step.id not in seen:
            path.append(step.id)
            seen.add(step.id)
            next_id = self.resolve_next(step, inputs)
            step = self.blueprint.get_step(next_id) if next_id else None

        return path

    def progress(self, current_step_id: str, inputs: RunInputs | None = None) -> Progress:
        """Compute how far along the predicted path the current step is."""
        path = self.predicted_path(inputs)
        total = len(path)
        if current_step_id not in path:
            return Progress(current_step_number=0, total_steps=total, percent=0)

        index = path.index(current_step_id)
        percent = round(index / (total - 1) * 100) if total > 1 else 0
        return Progress(current_step_number=index + 1, total_steps=total, percent=percent)
