"""Pydantic schemas for stored blueprint documents (camelCase JSON)."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from sessionrun.domain.session.entities import blueprint as bp


class DocumentModel(BaseModel):
    """Base for blueprint document parts: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class DefaultNextDocument(DocumentModel):
    default: str = Field(..., min_length=1)


class BranchDocument(DocumentModel):
    when: str = Field(..., min_length=1, max_length=200)
    to: str = Field(..., min_length=1)


class BranchNextDocument(DocumentModel):
    branches: list[BranchDocument] = Field(..., min_length=1)


NextDocument = DefaultNextDocument | BranchNextDocument


class StepDocumentBase(DocumentModel):
    id: str = Field(..., min_length=1, max_length=100)
    estimated_seconds: int | None = Field(None, gt=0, le=60 * 60)
    intent: bp.StepIntent | None = None
    next: NextDocument | None = None

    def _common(self) -> dict[str, Any]:
        next_: bp.StepNext | None = None
        if isinstance(self.next, DefaultNextDocument):
            next_ = bp.DefaultNext(to=self.next.default)
        elif isinstance(self.next, BranchNextDocument):
            next_ = bp.BranchNext(
                branches=tuple(bp.Branch(condition=b.when, to=b.to) for b in self.next.branches)
            )
        return {
            "id": self.id,
            "next": next_,
            "estimated_seconds": self.estimated_seconds,
            "intent": self.intent,
        }


class SessionIntroDocument(StepDocumentBase):
    type: Literal["SESSION_INTRO"]
    plan_title: str = ""
    module_title: str = ""
    session_title: str = ""
    duration_minutes: int | None = None
    difficulty: str = "beginner"
    learning_goals: list[str] = Field(default_factory=list)
    questions_to_cover: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)

    def to_domain(self) -> bp.Step:
        return bp.SessionIntroStep(
            **self._common(),
            plan_title=self.plan_title,
            module_title=self.module_title,
            session_title=self.session_title,
            duration_minutes=self.duration_minutes,
            difficulty=self.difficulty,
            learning_goals=tuple(self.learning_goals),
            questions_to_cover=tuple(self.questions_to_cover),
            prerequisites=tuple(self.prerequisites),
        )


class ConceptDocument(StepDocumentBase):
    type: Literal["CONCEPT"]
    title: str
    content: str

    def to_domain(self) -> bp.Step:
        return bp.ConceptStep(**self._common(), title=self.title, content_md=self.content)


class CheckDocument(StepDocumentBase):
    type: Literal["CHECK"]
    question: str
    options: list[str]
    answer_index: int = Field(..., ge=0)
    explanation: str | None = None

    def to_domain(self) -> bp.Step:
        return bp.CheckStep(
            **self._common(),
            question=self.question,
            options=tuple(self.options),
            answer_index=self.answer_index,
            explanation=self.explanation,
        )


class ClozeDocument(StepDocumentBase):
    type: Literal["CLOZE"]
    sentence: str
    blank_id: str | None = None
    options: list[str]
    answer_index: int = Field(..., ge=0)
    explanation: str | None = None

    def to_domain(self) -> bp.Step:
        return bp.ClozeStep(
            **self._common(),
            sentence=self.sentence,
            blank_id=self.blank_id,
            options=tuple(self.options),
            answer_index=self.answer_index,
            explanation=self.explanation,
        )


class MatchingPairDocument(DocumentModel):
    id: str
    left: str
    right: str


class MatchingDocument(StepDocumentBase):
    type: Literal["MATCHING"]
    instruction: str
    pairs: list[MatchingPairDocument]

    def to_domain(self) -> bp.Step:
        return bp.MatchingStep(
            **self._common(),
            instruction=self.instruction,
            pairs=tuple(bp.MatchingPair(id=p.id, left=p.left, right=p.right) for p in self.pairs),
        )


class FlashcardDocument(StepDocumentBase):
    type: Literal["FLASHCARD"]
    front: str
    back: str

    def to_domain(self) -> bp.Step:
        return bp.FlashcardStep(**self._common(), front=self.front, back=self.back)


class SpeedOxDocument(StepDocumentBase):
    type: Literal["SPEED_OX"]
    statement: str
    is_true: bool
    explanation: str | None = None

    def to_domain(self) -> bp.Step:
        return bp.SpeedOxStep(
            **self._common(),
            statement=self.statement,
            is_true=self.is_true,
            explanation=self.explanation,
        )


class ApplicationDocument(StepDocumentBase):
    type: Literal["APPLICATION"]
    scenario: str
    question: str
    options: list[str]
    correct_index: int = Field(..., ge=0)
    feedback: str | None = None

    def to_domain(self) -> bp.Step:
        return bp.ApplicationStep(
            **self._common(),
            scenario=self.scenario,
            question=self.question,
            options=tuple(self.options),
            correct_index=self.correct_index,
            feedback=self.feedback,
        )


class NextSessionPreviewDocument(DocumentModel):
    title: str
    description: str | None = None


class SessionSummaryDocument(StepDocumentBase):
    type: Literal["SESSION_SUMMARY"]
    encouragement: str = ""
    celebration_emoji: str | None = None
    completed_activities: list[str] = Field(default_factory=list)
    key_takeaways: list[str] = Field(default_factory=list)
    next_session_preview: NextSessionPreviewDocument | None = None

    def to_domain(self) -> bp.Step:
        preview = self.next_session_preview
        return bp.SessionSummaryStep(
            **self._common(),
            encouragement=self.encouragement,
            celebration_emoji=self.celebration_emoji,
            completed_activities=tuple(self.completed_activities),
            key_takeaways=tuple(self.key_takeaways),
            next_session_preview=(
                bp.NextSessionPreview(title=preview.title, description=preview.description)
                if preview
                else None
            ),
        )


StepDocument = Annotated[
    SessionIntroDocument
    | ConceptDocument
    | CheckDocument
    | ClozeDocument
    | MatchingDocument
    | FlashcardDocument
    | SpeedOxDocument
    | ApplicationDocument
    | SessionSummaryDocument,
    Field(discriminator="type"),
]


class BlueprintDocument(DocumentModel):
    """
    A stored blueprint.

    The start step is given as `startStepId`; older documents carry a
    `startStepIndex` instead, and documents with neither start at the
    first step.
    """

    schema_version: int = Field(1, ge=1)
    blueprint_id: str = Field(..., min_length=1, max_length=64)
    start_step_id: str | None = None
    start_step_index: int | None = Field(None, ge=0)
    steps: list[StepDocument] = Field(..., min_length=1)

    @model_validator(mode="after")
    def resolve_start_step(self) -> "BlueprintDocument":
        if self.start_step_id is None:
            index = min(self.start_step_index or 0, len(self.steps) - 1)
            self.start_step_id = self.steps[index].id
        return self

    def to_domain(self) -> bp.Blueprint:
        """Build the domain blueprint; graph validation happens there."""
        return bp.Blueprint(
            blueprint_id=self.blueprint_id,
            schema_version=self.schema_version,
            start_step_id=self.start_step_id or self.steps[0].id,
            steps=tuple(step.to_domain() for step in self.steps),
        )
