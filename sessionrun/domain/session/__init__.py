"""
Session bounded context - Domain layer.

This context handles executing a session blueprint for one learner:
- Step graph resolution (default and branching successors)
- Per-step completion gating
- Run state transitions with back/forward history

Aggregates:
- SessionRun: The aggregate root for a learner's attempt at a session
"""
