"""Session module entities."""

from .blueprint import (
    ApplicationStep,
    Blueprint,
    Branch,
    BranchNext,
    CheckStep,
    ClozeStep,
    ConceptStep,
    DefaultNext,
    FlashcardStep,
    MatchingPair,
    MatchingStep,
    NextSessionPreview,
    SessionIntroStep,
    SessionSummaryStep,
    SpeedOxStep,
    Step,
    StepIntent,
    StepNext,
    StepType,
)
from .plan_session import Plan, PlanSession, PlanStatus, SessionStatus, SessionType
from .session_run import ExitReason, RunStatus, SessionRun
from .session_summary import SessionSummary

__all__ = [
    "ApplicationStep",
    "Blueprint",
    "Branch",
    "BranchNext",
    "CheckStep",
    "ClozeStep",
    "ConceptStep",
    "DefaultNext",
    "ExitReason",
    "FlashcardStep",
    "MatchingPair",
    "MatchingStep",
    "NextSessionPreview",
    "Plan",
    "PlanSession",
    "PlanStatus",
    "RunStatus",
    "SessionIntroStep",
    "SessionRun",
    "SessionStatus",
    "SessionSummary",
    "SessionSummaryStep",
    "SessionType",
    "SpeedOxStep",
    "Step",
    "StepIntent",
    "StepNext",
    "StepType",
]
