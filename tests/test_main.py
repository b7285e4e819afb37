"""Tests for main API endpoints."""

from fastapi.testclient import TestClient


def test_root_endpoint(client: TestClient) -> None:
    """Test root endpoint returns welcome message."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to sessionrun API"}


def test_health_endpoint(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_api_root_endpoint(client: TestClient) -> None:
    """Test API v1 root endpoint."""
    response = client.get("/api/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "sessionrun API v1"
    assert data["version"] == "0.1.0"
    assert data["docs"] == "/api/v1/docs"


def test_missing_user_header_is_rejected(client: TestClient) -> None:
    response = client.get("/api/v1/session-runs/abcdef123456")
    assert response.status_code == 401
