"""Use case for reading a session run."""

from sessionrun.application.session.protocols.blueprint_provider import BlueprintProviderProtocol
from sessionrun.application.session.protocols.session_run_repository import (
    SessionRunRepositoryProtocol,
)
from sessionrun.application.session.protocols.session_summary_repository import (
    SessionSummaryRepositoryProtocol,
)
from sessionrun.application.session.use_cases.dtos import RunSnapshot
from sessionrun.application.session.use_cases.session_runs.run_lookup import (
    load_blueprint,
    load_owned_run,
)
from sessionrun.domain.session.services.step_graph_resolver import StepGraphResolver


class GetRunUseCase:
    """Use case for reading a session run together with its blueprint."""

    def __init__(
        self,
        run_repository: SessionRunRepositoryProtocol,
        blueprint_provider: BlueprintProviderProtocol,
        summary_repository: SessionSummaryRepositoryProtocol,
    ) -> None:
        self.run_repository = run_repository
        self.blueprint_provider = blueprint_provider
        self.summary_repository = summary_repository

    def get_run(self, user_id: int, run_id: str) -> RunSnapshot:
        """
        Get a run by public id.

        Args:
            user_id: ID of the user
            run_id: Public id of the run

        Returns:
            RunSnapshot with the run, its blueprint, progress and summary

        Raises:
            RunNotFoundError: If the run does not exist for the user
        """
        run = load_owned_run(self.run_repository, user_id, run_id)
        blueprint = load_blueprint(self.blueprint_provider, run.blueprint_id)
        progress = StepGraphResolver(blueprint).progress(run.current_step_id, run.inputs)
        summary = self.summary_repository.find_by_run(run.id) if run.is_terminal else None
        return RunSnapshot(run=run, blueprint=blueprint, progress=progress, summary=summary)
