from .run_inputs import FlashcardResult, RunInputs

__all__ = ["FlashcardResult", "RunInputs"]
