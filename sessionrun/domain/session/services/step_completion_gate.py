"""Domain service deciding whether the learner may leave a step."""

from sessionrun.domain.session.entities.blueprint import (
    ChoiceStep,
    FlashcardStep,
    MatchingStep,
    SpeedOxStep,
    Step,
)
from sessionrun.domain.session.value_objects.run_inputs import RunInputs


class StepCompletionGate:
    """Per-variant advance rules.

    - Intro, concept and summary steps never block
    - Choice steps (check, cloze, application) need an answer index
    - Matching needs exactly one connection per declared pair
    - Flashcards need to be revealed and self-assessed
    - Speed O/X needs a true/false answer

    Correctness is never required; a wrong answer still lets the learner on.
    """

    def can_advance(self, step: Step, inputs: RunInputs) -> bool:
        if isinstance(step, ChoiceStep):
            return step.id in inputs.answers
        if isinstance(step, MatchingStep):
            return inputs.connection_count(step.id) == len(step.pairs)
        if isinstance(step, FlashcardStep):
            return bool(inputs.flashcard_revealed.get(step.id)) and (
                step.id in inputs.flashcard_result
            )
        if isinstance(step, SpeedOxStep):
            return step.id in inputs.speed_ox_answers
        return True


def can_advance(step: Step, inputs: RunInputs) -> bool:
    """Module-level shortcut for StepCompletionGate().can_advance."""
    return _GATE.can_advance(step, inputs)


_GATE = StepCompletionGate()
