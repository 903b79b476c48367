"""Tests for health check endpoints."""
from unittest.mock import patch

from catalog.services.exceptions import StoreUnavailableError


def test_health_check(client):
    """Test basic health check."""
    response = client.get("/api/v1/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_store_probe(client):
    """Test the document store probe."""
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"


def test_store_probe_unreachable(client):
    """Test the probe reports a disconnected store."""
    with patch(
        "catalog.services.document_service.DocumentRepository.ping",
        side_effect=StoreUnavailableError("down")
    ):
        response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "disconnected"


def test_readiness_reports_database(client):
    """Test readiness check includes the document store."""
    response = client.get("/api/v1/health/ready")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] is True


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert "docs" in data
