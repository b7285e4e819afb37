"""FastAPI application for the session-run service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sessionrun.config import configure_logging, get_settings
from sessionrun.database import dispose_engine, initialize_database
from sessionrun.domain.common.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    ValidationError,
)
from sessionrun.exceptions import SessionRunError
from sessionrun.infrastructure.session.routers import session_runs_router

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.ENVIRONMENT)
    initialize_database(settings)
    logger.info(
        "Starting %s v%s (%s)", settings.PROJECT_NAME, settings.VERSION, settings.ENVIRONMENT
    )
    yield
    dispose_engine()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url=f"{settings.API_V1_PREFIX}/docs",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SessionRunError)
async def session_run_error_handler(_: Request, exc: SessionRunError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message},
    )


@app.exception_handler(DomainError)
async def domain_error_handler(_: Request, exc: DomainError) -> JSONResponse:
    """Translate domain errors that escaped the use cases into HTTP errors."""
    if isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
        code = getattr(exc, "code", "VALIDATION_ERROR")
    elif isinstance(exc, BusinessRuleViolationError):
        status_code = status.HTTP_409_CONFLICT
        code = "BUSINESS_RULE_VIOLATION"
    else:
        logger.error("Unhandled domain error: %s", exc, exc_info=exc)
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        code = "DOMAIN_ERROR"
    return JSONResponse(
        status_code=status_code,
        content={"code": code, "message": exc.message},
    )


app.include_router(session_runs_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "healthy"}


@app.get(f"{settings.API_V1_PREFIX}/")
def api_root() -> dict[str, str]:
    return {
        "message": f"{settings.PROJECT_NAME} v1",
        "version": settings.VERSION,
        "docs": f"{settings.API_V1_PREFIX}/docs",
    }
