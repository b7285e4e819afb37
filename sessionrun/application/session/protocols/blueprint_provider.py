"""Protocol for loading immutable session blueprints."""

from typing import Protocol

from sessionrun.domain.session.entities.blueprint import Blueprint


class BlueprintProviderProtocol(Protocol):
    """Blueprints are authored elsewhere; the engine only reads them back."""

    def get_blueprint(self, blueprint_id: str) -> Blueprint | None:
        """
        Load a blueprint by id.

        Returns:
            The blueprint, or None if no blueprint has that id

        Raises:
            InvalidBlueprintError: If the stored document is unusable
        """
        ...

    def save(self, blueprint: Blueprint) -> Blueprint:
        """Store a new blueprint. Existing blueprints are never overwritten."""
        ...
