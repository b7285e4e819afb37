"""
Fallback blueprints for sessions that were scheduled without one.

A template only needs the session's own details; the content steps are
generic prompts that point the learner back to the material.
"""

from sessionrun.domain.session.entities.blueprint import (
    Blueprint,
    ConceptStep,
    FlashcardStep,
    SessionIntroStep,
    SessionSummaryStep,
    SpeedOxStep,
    Step,
    StepIntent,
)
from sessionrun.domain.session.entities.plan_session import PlanSession, SessionType

DEFAULT_SESSION_MINUTES = 15


class BlueprintTemplateService:
    """Builds a minimal blueprint for a learning session."""

    def build(self, session: PlanSession, blueprint_id: str) -> Blueprint:
        minutes = session.estimated_minutes or DEFAULT_SESSION_MINUTES
        steps: list[Step] = [
            SessionIntroStep(
                id="intro",
                intent=StepIntent.INTRO,
                estimated_seconds=30,
                module_title=session.module_title or "",
                session_title=session.title,
                duration_minutes=minutes,
            ),
        ]

        if session.session_type is SessionType.REVIEW:
            steps += [
                FlashcardStep(
                    id="recall",
                    intent=StepIntent.RETRIEVAL,
                    estimated_seconds=60,
                    front=f"What do you remember about {session.title}?",
                    back="Compare your answer with your notes from the last session.",
                ),
                SpeedOxStep(
                    id="confidence",
                    intent=StepIntent.PRACTICE,
                    estimated_seconds=20,
                    statement=f"I could explain {session.title} to someone else.",
                    is_true=True,
                ),
            ]
        else:
            steps += [
                ConceptStep(
                    id="concept",
                    intent=StepIntent.EXPLAIN,
                    estimated_seconds=max(60, (minutes - 2) * 60),
                    title=session.title,
                    content_md=f"## {session.title}\n\nWork through the material for this session.",
                ),
                FlashcardStep(
                    id="recall",
                    intent=StepIntent.RETRIEVAL,
                    estimated_seconds=60,
                    front=f"Summarize the key idea of {session.title} in one sentence.",
                    back="Check your summary against the material.",
                ),
            ]

        steps.append(
            SessionSummaryStep(
                id="summary",
                intent=StepIntent.WRAPUP,
                estimated_seconds=30,
                encouragement="Nice work, session complete.",
                completed_activities=tuple(
                    step.type.value for step in steps if not isinstance(step, SessionIntroStep)
                ),
            )
        )

        return Blueprint(blueprint_id=blueprint_id, steps=tuple(steps), start_step_id="intro")
