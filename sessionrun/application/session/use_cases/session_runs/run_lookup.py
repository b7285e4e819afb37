"""Shared lookup for use cases that act on an existing run."""

from sessionrun.application.session.protocols.blueprint_provider import BlueprintProviderProtocol
from sessionrun.application.session.protocols.session_run_repository import (
    SessionRunRepositoryProtocol,
)
from sessionrun.domain.common.value_objects import PublicId, UserId
from sessionrun.domain.session.entities.blueprint import Blueprint
from sessionrun.domain.session.entities.session_run import SessionRun
from sessionrun.exceptions import BlueprintNotFoundError, RunNotFoundError


def load_owned_run(
    run_repository: SessionRunRepositoryProtocol, user_id: int, run_id: str
) -> SessionRun:
    """
    Load a run by public id, scoped to its owner.

    Raises:
        RunNotFoundError: If the id is malformed, unknown, or owned by someone else
    """
    if not PublicId.is_valid(run_id):
        raise RunNotFoundError(run_id)
    run = run_repository.find_by_public_id(PublicId(run_id), UserId(user_id))
    if run is None:
        raise RunNotFoundError(run_id)
    return run


def load_blueprint(blueprint_provider: BlueprintProviderProtocol, blueprint_id: str) -> Blueprint:
    blueprint = blueprint_provider.get_blueprint(blueprint_id)
    if blueprint is None:
        raise BlueprintNotFoundError(blueprint_id)
    return blueprint
