"""Evaluation of branch conditions attached to a step's `next` table."""

import re

from sessionrun.domain.session.entities.blueprint import (
    ChoiceStep,
    FlashcardStep,
    SpeedOxStep,
    Step,
)
from sessionrun.domain.session.value_objects.run_inputs import FlashcardResult, RunInputs

ALWAYS_CONDITIONS = frozenset({"always", "*", "default"})

_ANSWER_COMPARISON = re.compile(r"^answer\s*(==|!=)\s*(\d+)$")


def _is_correct(step: Step, inputs: RunInputs) -> bool | None:
    """Grade the recorded input for a step; None when nothing gradeable is recorded."""
    if isinstance(step, ChoiceStep):
        answer = inputs.answers.get(step.id)
        return None if answer is None else step.is_correct(answer)
    if isinstance(step, SpeedOxStep):
        speed_ox_answer = inputs.speed_ox_answers.get(step.id)
        return None if speed_ox_answer is None else step.is_correct(speed_ox_answer)
    if isinstance(step, FlashcardStep):
        result = inputs.flashcard_result.get(step.id)
        return None if result is None else result is FlashcardResult.KNOW
    return None


def _is_answered(step: Step, inputs: RunInputs) -> bool:
    return (
        step.id in inputs.answers
        or step.id in inputs.speed_ox_answers
        or step.id in inputs.flashcard_result
        or inputs.connection_count(step.id) > 0
    )


def condition_matches(condition: str, step: Step, inputs: RunInputs) -> bool:
    """
    Check whether a branch condition holds for the step's recorded input.

    Supported conditions (case-insensitive):
        always, *, default   always true
        answered             any input recorded for the step
        correct, incorrect   graded answer (choice, speed O/X, flashcard)
        answer == N, != N    raw choice index comparison
        know, dontknow       flashcard self-assessment
        true, false          speed O/X answer

    Unknown conditions, or conditions that need an input not yet given,
    never match.
    """
    normalized = condition.strip().lower()

    if normalized in ALWAYS_CONDITIONS:
        return True
    if normalized == "answered":
        return _is_answered(step, inputs)
    if normalized in ("correct", "incorrect"):
        graded = _is_correct(step, inputs)
        if graded is None:
            return False
        return graded if normalized == "correct" else not graded
    if normalized in (FlashcardResult.KNOW, FlashcardResult.DONT_KNOW):
        result = inputs.flashcard_result.get(step.id)
        return result is not None and result == normalized
    if normalized in ("true", "false"):
        answer = inputs.speed_ox_answers.get(step.id)
        return answer is not None and answer is (normalized == "true")

    comparison = _ANSWER_COMPARISON.match(normalized)
    if comparison:
        recorded = inputs.answers.get(step.id)
        if recorded is None:
            return False
        operator, expected = comparison.groups()
        return (recorded == int(expected)) == (operator == "==")

    return False
