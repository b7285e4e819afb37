"""
Domain layer.

The domain layer contains the core rules of the run engine. It has no
dependencies on external frameworks or infrastructure.

This layer contains:
- Entities: blueprints, plans, learning sessions and runs
- Value Objects: ids and the run input bag
- Domain Services: graph resolution, completion gating and the run reducer
"""
