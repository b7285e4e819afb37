"""Use case for autosaving a run's position and inputs."""

from datetime import UTC, datetime
from typing import Any

import structlog

from sessionrun.application.session.protocols.blueprint_provider import BlueprintProviderProtocol
from sessionrun.application.session.protocols.session_run_repository import (
    SessionRunRepositoryProtocol,
)
from sessionrun.application.session.use_cases.dtos import SaveProgressResult
from sessionrun.application.session.use_cases.session_runs.run_lookup import (
    load_blueprint,
    load_owned_run,
)
from sessionrun.domain.session.entities.blueprint import Blueprint
from sessionrun.domain.session.entities.session_run import SessionRun
from sessionrun.domain.session.exceptions import InvalidStepInputError
from sessionrun.domain.session.value_objects.run_inputs import RunInputs

logger = structlog.get_logger(__name__)


class SaveProgressUseCase:
    """Use case for saving a client snapshot of a run."""

    def __init__(
        self,
        run_repository: SessionRunRepositoryProtocol,
        blueprint_provider: BlueprintProviderProtocol,
    ) -> None:
        self.run_repository = run_repository
        self.blueprint_provider = blueprint_provider

    def save_progress(
        self,
        user_id: int,
        run_id: str,
        step_index: int | None,
        inputs: Any,
        step_history: list[str] | None = None,
        history_index: int | None = None,
    ) -> SaveProgressResult:
        """
        Save the latest position and inputs of a run.

        Saving is idempotent and last-write-wins. A completed run is never
        touched. A malformed input payload is dropped as a whole instead of
        being merged into stored state. Positions that do not fit the
        blueprint are ignored and the stored position is kept.

        Args:
            user_id: ID of the user
            run_id: Public id of the run
            step_index: Index of the current step in the blueprint's step list
            inputs: Raw camelCase input payload
            step_history: Optional full navigation history (step ids)
            history_index: Optional position within step_history

        Returns:
            SaveProgressResult; `saved` is False when nothing was written

        Raises:
            RunNotFoundError: If the run does not exist for the user
        """
        run = load_owned_run(self.run_repository, user_id, run_id)
        now = datetime.now(UTC)

        if run.is_terminal:
            logger.info("progress_ignored_for_completed_run", run_id=run_id)
            return SaveProgressResult(saved_at=run.updated_at or now, saved=False)

        try:
            parsed_inputs = RunInputs.parse(inputs)
        except InvalidStepInputError as e:
            logger.warning(
                "progress_payload_dropped",
                run_id=run_id,
                reason=e.message,
                field=e.field,
            )
            return SaveProgressResult(saved_at=now, saved=False)

        blueprint = load_blueprint(self.blueprint_provider, run.blueprint_id)
        history, index = self._resolve_position(
            run, blueprint, step_index, step_history, history_index
        )

        run.record_progress(history, index, parsed_inputs, now=now)
        if not self.run_repository.save_progress(run):
            # Completed by another writer after the run was loaded
            logger.info("progress_ignored_for_completed_run", run_id=run_id)
            return SaveProgressResult(saved_at=now, saved=False)

        logger.debug(
            "session_run_progress_saved",
            run_id=run_id,
            current_step_id=run.current_step_id,
            history_length=len(run.step_history),
        )
        return SaveProgressResult(saved_at=run.updated_at or now, saved=True)

    def _resolve_position(
        self,
        run: SessionRun,
        blueprint: Blueprint,
        step_index: int | None,
        step_history: list[str] | None,
        history_index: int | None,
    ) -> tuple[list[str], int]:
        """Work out the position to store; falls back to the stored one."""
        if step_history is not None:
            if self._is_valid_history(blueprint, step_history):
                if history_index is None:
                    return list(step_history), len(step_history) - 1
                if 0 <= history_index < len(step_history):
                    return list(step_history), history_index
            logger.warning(
                "progress_position_dropped",
                run_id=str(run.public_id),
                step_history=step_history,
                history_index=history_index,
            )
            return run.step_history, run.history_index

        if step_index is None:
            return run.step_history, run.history_index

        step = blueprint.step_at(step_index)
        if step is None:
            logger.warning(
                "progress_position_dropped", run_id=str(run.public_id), step_index=step_index
            )
            return run.step_history, run.history_index

        history = run.step_history
        if step.id in history:
            # Moving within known history (back/forward) keeps the forward entries
            return history, len(history) - 1 - history[::-1].index(step.id)
        # New step: same as a forward move, abandoning any forward history
        history = [*history[: run.history_index + 1], step.id]
        return history, len(history) - 1

    @staticmethod
    def _is_valid_history(blueprint: Blueprint, step_history: list[str]) -> bool:
        return (
            bool(step_history)
            and step_history[0] == blueprint.start_step_id
            and all(blueprint.has_step(step_id) for step_id in step_history)
        )
