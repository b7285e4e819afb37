from .blueprint_templates import BlueprintTemplateService
from .branch_conditions import condition_matches
from .run_state_machine import RunState, reduce
from .step_completion_gate import StepCompletionGate, can_advance
from .step_graph_resolver import Progress, StepGraphResolver

__all__ = [
    "BlueprintTemplateService",
    "Progress",
    "RunState",
    "StepCompletionGate",
    "StepGraphResolver",
    "can_advance",
    "condition_matches",
    "reduce",
]
