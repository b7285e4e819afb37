"""Pytest configuration and fixtures."""

from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sessionrun import models
from sessionrun.database import Base, get_db
from sessionrun.main import app

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

# One shared connection so the request threads see the fixtures' tables
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

DEFAULT_USER_ID = 1
USER_HEADERS = {"X-User-Id": str(DEFAULT_USER_ID)}


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, Any, None]:
    """Create a test client with database session."""

    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def sample_blueprint_document(blueprint_id: str = "bp-linear") -> dict[str, Any]:
    """A small blueprint: intro, concept, check, flashcard, summary."""
    return {
        "schemaVersion": 1,
        "blueprintId": blueprint_id,
        "startStepId": "intro",
        "steps": [
            {"id": "intro", "type": "SESSION_INTRO", "sessionTitle": "Closures"},
            {
                "id": "concept",
                "type": "CONCEPT",
                "title": "What is a closure?",
                "content": "A function that *remembers* its scope.",
            },
            {
                "id": "check",
                "type": "CHECK",
                "question": "Which keyword rebinds an outer name?",
                "options": ["global", "nonlocal", "outer"],
                "answerIndex": 1,
            },
            {"id": "card", "type": "FLASHCARD", "front": "Closure", "back": "Captured scope"},
            {"id": "summary", "type": "SESSION_SUMMARY", "encouragement": "Nice work"},
        ],
    }


def create_test_plan(
    db_session: Session,
    user_id: int = DEFAULT_USER_ID,
    title: str = "Python in depth",
    status: str = "ACTIVE",
) -> models.Plan:
    """Helper function to create a learning plan."""
    plan = models.Plan(user_id=user_id, title=title, status=status)
    db_session.add(plan)
    db_session.commit()
    db_session.refresh(plan)
    return plan


def create_test_blueprint(
    db_session: Session, document: dict[str, Any] | None = None
) -> models.SessionBlueprint:
    """Helper function to store a blueprint document."""
    document = document or sample_blueprint_document()
    blueprint = models.SessionBlueprint(
        blueprint_id=document["blueprintId"],
        schema_version=document.get("schemaVersion", 1),
        document=document,
    )
    db_session.add(blueprint)
    db_session.commit()
    db_session.refresh(blueprint)
    return blueprint


def create_test_session(
    db_session: Session,
    plan: models.Plan,
    public_id: str = "sess-closures",
    title: str = "Closures",
    blueprint_id: str | None = None,
    status: str = "SCHEDULED",
    session_type: str = "LEARN",
) -> models.PlanSession:
    """Helper function to create a learning session in a plan."""
    session = models.PlanSession(
        public_id=public_id,
        plan_id=plan.id,
        title=title,
        blueprint_id=blueprint_id,
        status=status,
        session_type=session_type,
    )
    db_session.add(session)
    db_session.commit()
    db_session.refresh(session)
    return session
