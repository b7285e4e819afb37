from collections.abc import Callable
from typing import TypeVar

from dependency_injector.providers import Provider

from sessionrun.core import container
from sessionrun.database import DatabaseSession

T = TypeVar("T")


def inject_use_case(provider: Provider[T]) -> Callable[[DatabaseSession], T]:
    """
    Create a FastAPI dependency for a container provider.

    The container's db dependency is overridden with the request-scoped
    session only while the use case is being built.
    """

    def dependency(db: DatabaseSession) -> T:
        try:
            container.db.override(db)
            return provider()
        finally:
            container.db.reset_override()

    return dependency
