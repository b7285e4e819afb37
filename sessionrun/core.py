from dependency_injector import containers, providers
from sqlalchemy.orm import Session

from sessionrun.application.session.services.session_summary_writer import SessionSummaryWriter
from sessionrun.application.session.use_cases.session_runs import (
    AbandonRunUseCase,
    CompleteRunUseCase,
    CreateOrResumeRunUseCase,
    GetRunUseCase,
    SaveProgressUseCase,
)
from sessionrun.config import get_settings
from sessionrun.domain.session.services.blueprint_templates import BlueprintTemplateService
from sessionrun.infrastructure.session.repositories import (
    BlueprintRepository,
    LearningSessionRepository,
    SessionRunRepository,
    SessionSummaryRepository,
)


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Declare db as a dependency that will be provided at runtime
    db = providers.Dependency(instance_of=Session)

    settings = providers.Singleton(get_settings)

    # Repositories
    session_run_repository = providers.Factory(SessionRunRepository, db=db)
    learning_session_repository = providers.Factory(LearningSessionRepository, db=db)
    blueprint_repository = providers.Factory(BlueprintRepository, db=db)
    session_summary_repository = providers.Factory(SessionSummaryRepository, db=db)

    # Domain services (pure domain logic, no db)
    blueprint_template_service = providers.Factory(BlueprintTemplateService)

    # Completion notifiers
    session_summary_writer = providers.Factory(
        SessionSummaryWriter,
        summary_repository=session_summary_repository,
        learning_session_repository=learning_session_repository,
    )

    # Session module, application use cases
    create_or_resume_run_use_case = providers.Factory(
        CreateOrResumeRunUseCase,
        run_repository=session_run_repository,
        learning_session_repository=learning_session_repository,
        blueprint_provider=blueprint_repository,
        template_service=blueprint_template_service,
        public_id_length=settings.provided.RUN_PUBLIC_ID_LENGTH,
    )

    get_run_use_case = providers.Factory(
        GetRunUseCase,
        run_repository=session_run_repository,
        blueprint_provider=blueprint_repository,
        summary_repository=session_summary_repository,
    )

    save_progress_use_case = providers.Factory(
        SaveProgressUseCase,
        run_repository=session_run_repository,
        blueprint_provider=blueprint_repository,
    )

    complete_run_use_case = providers.Factory(
        CompleteRunUseCase,
        run_repository=session_run_repository,
        learning_session_repository=learning_session_repository,
        notifiers=providers.List(session_summary_writer),
    )

    abandon_run_use_case = providers.Factory(
        AbandonRunUseCase,
        run_repository=session_run_repository,
        learning_session_repository=learning_session_repository,
    )


# Initialize container
container = Container()
