"""Use case for starting a learning session, or resuming the run already under way."""

import structlog

from sessionrun.application.session.protocols.blueprint_provider import BlueprintProviderProtocol
from sessionrun.application.session.protocols.learning_session_repository import (
    LearningSessionRepositoryProtocol,
)
from sessionrun.application.session.protocols.session_run_repository import (
    SessionRunRepositoryProtocol,
)
from sessionrun.application.session.use_cases.dtos import CreateOrResumeResult
from sessionrun.application.session.use_cases.session_runs.run_lookup import load_blueprint
from sessionrun.domain.common.value_objects import PublicId, UserId
from sessionrun.domain.common.value_objects.public_id import DEFAULT_PUBLIC_ID_LENGTH
from sessionrun.domain.session.entities.blueprint import Blueprint
from sessionrun.domain.session.entities.plan_session import PlanSession
from sessionrun.domain.session.entities.session_run import SessionRun
from sessionrun.domain.session.services.blueprint_templates import BlueprintTemplateService
from sessionrun.exceptions import (
    ConcurrentRunExistsError,
    IdempotencyKeyConflictError,
    PlanNotActiveError,
    SessionAlreadyCompletedError,
    SessionNotFoundError,
    SessionNotStartableError,
)

logger = structlog.get_logger(__name__)

TEMPLATE_BLUEPRINT_PREFIX = "template-"


class CreateOrResumeRunUseCase:
    """Use case for starting or resuming a session run."""

    def __init__(
        self,
        run_repository: SessionRunRepositoryProtocol,
        learning_session_repository: LearningSessionRepositoryProtocol,
        blueprint_provider: BlueprintProviderProtocol,
        template_service: BlueprintTemplateService | None = None,
        public_id_length: int = DEFAULT_PUBLIC_ID_LENGTH,
    ) -> None:
        """Initialize use case with repository protocols."""
        self.run_repository = run_repository
        self.learning_session_repository = learning_session_repository
        self.blueprint_provider = blueprint_provider
        self.template_service = template_service or BlueprintTemplateService()
        self.public_id_length = public_id_length

    def create_or_resume(
        self, user_id: int, session_id: str, idempotency_key: str | None = None
    ) -> CreateOrResumeResult:
        """
        Return the user's run for a learning session, creating it if needed.

        A non-terminal run for (user, session) is resumed, never reset. Two
        starts carrying the same idempotency key, or racing each other, end
        up with the same run.

        Args:
            user_id: ID of the user
            session_id: Public id of the learning session
            idempotency_key: Optional client-generated key for this start

        Returns:
            CreateOrResumeResult with the run and whether it was created or recovered

        Raises:
            SessionNotFoundError: If the session does not exist for the user
            IdempotencyKeyConflictError: If the key was used for another session
            PlanNotActiveError: If the owning plan is not active
            SessionAlreadyCompletedError: If the session is already completed
            SessionNotStartableError: If the session was skipped or canceled
        """
        user_id_vo = UserId(user_id)
        session = self._get_session(session_id, user_id_vo)

        if idempotency_key:
            keyed_run = self._find_by_idempotency_key(user_id_vo, session, idempotency_key)
            if keyed_run is not None:
                logger.info(
                    "session_run_idempotent_replay",
                    run_id=str(keyed_run.public_id),
                    session_id=session_id,
                )
                return CreateOrResumeResult(run=keyed_run, is_recovery=False, created=False)

        plan = self.learning_session_repository.find_plan(session.plan_id)
        if plan is None or not plan.is_active:
            raise PlanNotActiveError(plan.status if plan else "missing")
        if session.is_completed:
            raise SessionAlreadyCompletedError(session_id)
        if not session.is_startable:
            raise SessionNotStartableError(session_id, session.status)

        existing = self.run_repository.find_active(user_id_vo, session.id)
        if existing is not None:
            return self._resume(existing)

        blueprint = self._get_blueprint(session)
        run = SessionRun.create(
            user_id=user_id_vo,
            session_id=session.id,
            plan_id=session.plan_id,
            blueprint_id=blueprint.blueprint_id,
            start_step_id=blueprint.start_step_id,
            idempotency_key=idempotency_key,
            public_id=PublicId.generate(self.public_id_length),
        )

        try:
            run = self.run_repository.save(run)
        except ConcurrentRunExistsError:
            return self._recover_from_concurrent_start(user_id_vo, session, idempotency_key)

        session.mark_in_progress()
        self.learning_session_repository.save_session(session)

        logger.info(
            "session_run_created",
            run_id=str(run.public_id),
            session_id=session_id,
            blueprint_id=blueprint.blueprint_id,
            user_id=user_id,
        )
        return CreateOrResumeResult(run=run, is_recovery=False, created=True)

    def _get_session(self, session_id: str, user_id: UserId) -> PlanSession:
        if not PublicId.is_valid(session_id):
            raise SessionNotFoundError(session_id)
        session = self.learning_session_repository.find_by_public_id(PublicId(session_id), user_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _find_by_idempotency_key(
        self, user_id: UserId, session: PlanSession, idempotency_key: str
    ) -> SessionRun | None:
        run = self.run_repository.find_by_idempotency_key(user_id, idempotency_key)
        if run is not None and run.session_id != session.id:
            raise IdempotencyKeyConflictError(idempotency_key)
        return run

    def _resume(self, run: SessionRun) -> CreateOrResumeResult:
        run.mark_recovered()
        run = self.run_repository.save(run)
        logger.info(
            "session_run_resumed",
            run_id=str(run.public_id),
            current_step_id=run.current_step_id,
        )
        return CreateOrResumeResult(run=run, is_recovery=True, created=False)

    def _recover_from_concurrent_start(
        self, user_id: UserId, session: PlanSession, idempotency_key: str | None
    ) -> CreateOrResumeResult:
        """The other start won the insert; hand back its run."""
        winner = None
        if idempotency_key:
            winner = self._find_by_idempotency_key(user_id, session, idempotency_key)
        if winner is None:
            winner = self.run_repository.find_active(user_id, session.id)
        if winner is None:
            raise ConcurrentRunExistsError

        logger.info(
            "session_run_concurrent_start_resolved",
            run_id=str(winner.public_id),
            session_id=str(session.public_id),
        )
        return CreateOrResumeResult(run=winner, is_recovery=winner.is_recovery, created=False)

    def _get_blueprint(self, session: PlanSession) -> Blueprint:
        if session.blueprint_id:
            return load_blueprint(self.blueprint_provider, session.blueprint_id)

        # Sessions scheduled without content run a template; it is stored and
        # attached so every later run of the session sees the same steps.
        blueprint_id = f"{TEMPLATE_BLUEPRINT_PREFIX}{session.public_id}"
        blueprint = self.blueprint_provider.get_blueprint(blueprint_id)
        if blueprint is None:
            blueprint = self.blueprint_provider.save(
                self.template_service.build(session, blueprint_id)
            )
            logger.info(
                "template_blueprint_created",
                blueprint_id=blueprint_id,
                session_type=session.session_type,
            )
        session.attach_blueprint(blueprint_id)
        return blueprint
