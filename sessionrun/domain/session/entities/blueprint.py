"""
Session blueprint: the immutable step graph a run executes.

A blueprint is authored once (by an external collaborator) and is only
ever read by the engine. Steps form a tagged variant; each variant carries
its own prompt data and an optional `next` routing table.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import ClassVar

from sessionrun.domain.session.exceptions import InvalidBlueprintError

CURRENT_SCHEMA_VERSION = 1


class StepType(StrEnum):
    SESSION_INTRO = "SESSION_INTRO"
    CONCEPT = "CONCEPT"
    CHECK = "CHECK"
    CLOZE = "CLOZE"
    MATCHING = "MATCHING"
    FLASHCARD = "FLASHCARD"
    SPEED_OX = "SPEED_OX"
    APPLICATION = "APPLICATION"
    SESSION_SUMMARY = "SESSION_SUMMARY"


class StepIntent(StrEnum):
    INTRO = "INTRO"
    EXPLAIN = "EXPLAIN"
    RETRIEVAL = "RETRIEVAL"
    PRACTICE = "PRACTICE"
    WRAPUP = "WRAPUP"


@dataclass(frozen=True)
class DefaultNext:
    """Unconditional successor."""

    to: str


@dataclass(frozen=True)
class Branch:
    """One conditional edge; `condition` is evaluated against recorded inputs."""

    condition: str
    to: str


@dataclass(frozen=True)
class BranchNext:
    """Ordered branch table, first match wins."""

    branches: tuple[Branch, ...]


StepNext = DefaultNext | BranchNext


@dataclass(frozen=True, kw_only=True)
class Step:
    """Common step fields. Concrete variants set `type`."""

    type: ClassVar[StepType]

    id: str
    next: StepNext | None = None
    estimated_seconds: int | None = None
    intent: StepIntent | None = None

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise InvalidBlueprintError("step id cannot be empty", field="id")

    @property
    def is_terminal(self) -> bool:
        return self.type is StepType.SESSION_SUMMARY

    def targets(self) -> list[str]:
        """Every step id this step can route to explicitly."""
        if isinstance(self.next, DefaultNext):
            return [self.next.to]
        if isinstance(self.next, BranchNext):
            return [branch.to for branch in self.next.branches]
        return []


@dataclass(frozen=True, kw_only=True)
class SessionIntroStep(Step):
    type: ClassVar[StepType] = StepType.SESSION_INTRO

    plan_title: str = ""
    module_title: str = ""
    session_title: str = ""
    duration_minutes: int | None = None
    difficulty: str = "beginner"
    learning_goals: tuple[str, ...] = ()
    questions_to_cover: tuple[str, ...] = ()
    prerequisites: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ConceptStep(Step):
    type: ClassVar[StepType] = StepType.CONCEPT

    title: str
    content_md: str


@dataclass(frozen=True, kw_only=True)
class ChoiceStep(Step):
    """Single-answer multiple choice; shared by CHECK, CLOZE and APPLICATION."""

    options: tuple[str, ...]

    def __post_init__(self) -> None:
        super().__post_init__()
        if len(self.options) < 2:
            raise InvalidBlueprintError(
                f"step {self.id} needs at least two options", field="options"
            )
        if not 0 <= self.correct_option < len(self.options):
            raise InvalidBlueprintError(
                f"step {self.id} correct option is out of range",
                field="options",
                value=self.correct_option,
            )

    @property
    def correct_option(self) -> int:
        raise NotImplementedError

    def is_correct(self, answer_index: int) -> bool:
        return answer_index == self.correct_option


@dataclass(frozen=True, kw_only=True)
class CheckStep(ChoiceStep):
    type: ClassVar[StepType] = StepType.CHECK

    question: str
    answer_index: int
    explanation: str | None = None

    @property
    def correct_option(self) -> int:
        return self.answer_index


@dataclass(frozen=True, kw_only=True)
class ClozeStep(ChoiceStep):
    type: ClassVar[StepType] = StepType.CLOZE

    sentence: str
    answer_index: int
    blank_id: str | None = None
    explanation: str | None = None

    @property
    def correct_option(self) -> int:
        return self.answer_index


@dataclass(frozen=True, kw_only=True)
class ApplicationStep(ChoiceStep):
    type: ClassVar[StepType] = StepType.APPLICATION

    scenario: str
    question: str
    correct_index: int
    feedback: str | None = None

    @property
    def correct_option(self) -> int:
        return self.correct_index


@dataclass(frozen=True)
class MatchingPair:
    id: str
    left: str
    right: str


@dataclass(frozen=True, kw_only=True)
class MatchingStep(Step):
    """Pair linking. Connections are counted, never graded."""

    type: ClassVar[StepType] = StepType.MATCHING

    instruction: str
    pairs: tuple[MatchingPair, ...]

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.pairs:
            raise InvalidBlueprintError(f"step {self.id} has no pairs", field="pairs")


@dataclass(frozen=True, kw_only=True)
class FlashcardStep(Step):
    type: ClassVar[StepType] = StepType.FLASHCARD

    front: str
    back: str


@dataclass(frozen=True, kw_only=True)
class SpeedOxStep(Step):
    type: ClassVar[StepType] = StepType.SPEED_OX

    statement: str
    is_true: bool
    explanation: str | None = None

    def is_correct(self, answer: bool) -> bool:
        return answer is self.is_true


@dataclass(frozen=True)
class NextSessionPreview:
    title: str
    description: str | None = None


@dataclass(frozen=True, kw_only=True)
class SessionSummaryStep(Step):
    type: ClassVar[StepType] = StepType.SESSION_SUMMARY

    encouragement: str = ""
    celebration_emoji: str | None = None
    completed_activities: tuple[str, ...] = ()
    key_takeaways: tuple[str, ...] = ()
    next_session_preview: NextSessionPreview | None = None


@dataclass(frozen=True)
class Blueprint:
    """
    Immutable, versioned step graph for one learning session.

    Business Rules:
    - At least one step, step ids unique
    - The start step exists
    - Every explicit `next` target refers to a step in this blueprint
    """

    blueprint_id: str
    steps: tuple[Step, ...]
    start_step_id: str
    schema_version: int = CURRENT_SCHEMA_VERSION
    created_at: datetime | None = None

    _by_id: dict[str, Step] = field(init=False, repr=False, compare=False)
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.steps:
            raise InvalidBlueprintError("a blueprint needs at least one step", field="steps")

        by_id: dict[str, Step] = {}
        index: dict[str, int] = {}
        for position, step in enumerate(self.steps):
            if step.id in by_id:
                raise InvalidBlueprintError(f"duplicate step id {step.id}", field="steps")
            by_id[step.id] = step
            index[step.id] = position

        if self.start_step_id not in by_id:
            raise InvalidBlueprintError(
                "start step is not part of the blueprint",
                field="start_step_id",
                value=self.start_step_id,
            )

        for step in self.steps:
            for target in step.targets():
                if target not in by_id:
                    raise InvalidBlueprintError(
                        f"step {step.id} routes to unknown step {target}", field="next"
                    )

        # frozen dataclass: caches are written once, through object.__setattr__
        object.__setattr__(self, "_by_id", by_id)
        object.__setattr__(self, "_index", index)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def start_step(self) -> Step:
        return self._by_id[self.start_step_id]

    def get_step(self, step_id: str) -> Step | None:
        return self._by_id.get(step_id)

    def has_step(self, step_id: str) -> bool:
        return step_id in self._by_id

    def index_of(self, step_id: str) -> int | None:
        return self._index.get(step_id)

    def step_at(self, index: int) -> Step | None:
        if 0 <= index < len(self.steps):
            return self.steps[index]
        return None

    def step_after(self, step_id: str) -> Step | None:
        """Positional successor in the step list, or None for the last step."""
        position = self._index.get(step_id)
        if position is None:
            return None
        return self.step_at(position + 1)
