"""API routes for session runs."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status

from sessionrun.application.session.use_cases.session_runs import (
    AbandonRunUseCase,
    CompleteRunUseCase,
    CreateOrResumeRunUseCase,
    GetRunUseCase,
    SaveProgressUseCase,
)
from sessionrun.core import container
from sessionrun.domain.common.exceptions import DomainError
from sessionrun.domain.common.value_objects import UserId
from sessionrun.exceptions import SessionRunError
from sessionrun.infrastructure.common.di import inject_use_case
from sessionrun.infrastructure.identity.dependencies import get_current_user_id
from sessionrun.infrastructure.session.mappers.blueprint_mapper import BlueprintMapper
from sessionrun.infrastructure.session.schemas import (
    AbandonRunRequest,
    AbandonRunResponse,
    CompleteRunResponse,
    ProgressSchema,
    SaveProgressRequest,
    SaveProgressResponse,
    SessionRunResponse,
    SessionSummarySchema,
    StartRunResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["session-runs"])

_blueprint_mapper = BlueprintMapper()


def _unexpected(action: str, target: str, e: Exception) -> HTTPException:
    logger.error(f"Failed to {action} {target}: {e!s}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred. Please try again later.",
    )


@router.post(
    "/sessions/{session_id}/runs",
    response_model=StartRunResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_or_resume_run(
    session_id: str,
    response: Response,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    idempotency_key: Annotated[str | None, Header(max_length=100)] = None,
    use_case: CreateOrResumeRunUseCase = Depends(
        inject_use_case(container.create_or_resume_run_use_case)
    ),
) -> StartRunResponse:
    """
    Start a learning session, or resume the run already under way.

    Returns 201 when a run was created and 200 when an existing run is
    returned (recovery or a repeated Idempotency-Key).

    Raises:
        HTTPException: If starting the session fails unexpectedly
    """
    try:
        result = use_case.create_or_resume(
            user_id=user_id.value,
            session_id=session_id,
            idempotency_key=idempotency_key,
        )
        if not result.created:
            response.status_code = status.HTTP_200_OK
        return StartRunResponse(
            run_id=str(result.run.public_id),
            session_id=session_id,
            status=result.run.status.value,
            is_recovery=result.is_recovery,
            current_step_id=result.run.current_step_id,
        )
    except (SessionRunError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("start session", session_id, e) from e


@router.get(
    "/session-runs/{run_id}",
    response_model=SessionRunResponse,
    status_code=status.HTTP_200_OK,
)
def get_session_run(
    run_id: str,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    use_case: GetRunUseCase = Depends(inject_use_case(container.get_run_use_case)),
) -> SessionRunResponse:
    """
    Get a run with its blueprint, history, inputs and progress.

    Raises:
        HTTPException: If loading the run fails unexpectedly
    """
    try:
        snapshot = use_case.get_run(user_id=user_id.value, run_id=run_id)
        run = snapshot.run
        return SessionRunResponse(
            run_id=str(run.public_id),
            blueprint_id=run.blueprint_id,
            status=run.status.value,
            exit_reason=run.exit_reason.value if run.exit_reason else None,
            is_recovery=run.is_recovery,
            current_step_id=run.current_step_id,
            step_history=list(run.step_history),
            history_index=run.history_index,
            inputs=run.inputs.to_payload(),
            progress=ProgressSchema(
                current_step_number=snapshot.progress.current_step_number,
                total_steps=snapshot.progress.total_steps,
                percent=snapshot.progress.percent,
            ),
            blueprint=_blueprint_mapper.to_document(snapshot.blueprint),
            summary=(
                SessionSummarySchema(
                    summary_md=snapshot.summary.summary_md,
                    duration_minutes=snapshot.summary.duration_minutes,
                    created_at=snapshot.summary.created_at,
                )
                if snapshot.summary
                else None
            ),
            started_at=run.started_at,
            ended_at=run.ended_at,
            updated_at=run.updated_at,
        )
    except (SessionRunError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("get session run", run_id, e) from e


@router.put(
    "/session-runs/{run_id}/progress",
    response_model=SaveProgressResponse,
    status_code=status.HTTP_200_OK,
)
def save_session_run_progress(
    run_id: str,
    request: SaveProgressRequest,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    use_case: SaveProgressUseCase = Depends(inject_use_case(container.save_progress_use_case)),
) -> SaveProgressResponse:
    """
    Autosave a run's position and inputs.

    Saving a completed run, or a malformed input bag, answers 200 with
    `saved: false`.

    Raises:
        HTTPException: If saving fails unexpectedly
    """
    try:
        result = use_case.save_progress(
            user_id=user_id.value,
            run_id=run_id,
            step_index=request.step_index,
            inputs=request.inputs,
            step_history=request.step_history,
            history_index=request.history_index,
        )
        return SaveProgressResponse(run_id=run_id, saved=result.saved, saved_at=result.saved_at)
    except (SessionRunError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("save progress of session run", run_id, e) from e


@router.post(
    "/session-runs/{run_id}/complete",
    response_model=CompleteRunResponse,
    status_code=status.HTTP_200_OK,
)
def complete_session_run(
    run_id: str,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    use_case: CompleteRunUseCase = Depends(inject_use_case(container.complete_run_use_case)),
) -> CompleteRunResponse:
    """
    Complete a run. Completing an already completed run succeeds.

    Raises:
        HTTPException: If completion fails unexpectedly
    """
    try:
        result = use_case.complete(user_id=user_id.value, run_id=run_id)
        return CompleteRunResponse(run_id=run_id, status=result.status)
    except (SessionRunError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("complete session run", run_id, e) from e


@router.post(
    "/session-runs/{run_id}/abandon",
    response_model=AbandonRunResponse,
    status_code=status.HTTP_200_OK,
)
def abandon_session_run(
    run_id: str,
    user_id: Annotated[UserId, Depends(get_current_user_id)],
    request: AbandonRunRequest | None = None,
    use_case: AbandonRunUseCase = Depends(inject_use_case(container.abandon_run_use_case)),
) -> AbandonRunResponse:
    """
    Abandon a run so the session can be started again later.

    Raises:
        HTTPException: If abandoning fails unexpectedly
    """
    try:
        reason = request.reason if request else AbandonRunRequest().reason
        result = use_case.abandon(user_id=user_id.value, run_id=run_id, reason=reason)
        return AbandonRunResponse(run_id=run_id, status=result.status)
    except (SessionRunError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("abandon session run", run_id, e) from e
