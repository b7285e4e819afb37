"""
Infrastructure layer.

The infrastructure layer contains implementations of ports defined
in the application layer. It handles all external concerns:

- Persistence (database, ORM, blueprint documents)
- Web framework (FastAPI, routers)
- Configuration and dependency injection
"""
