"""
Tests for the /scans endpoints. The background pipeline is stubbed out; it is
covered by the orchestrator tests.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.features.scan.models.scan import ScanStatus
from app.features.scan.services.orchestration.orchestrator import ScanOrchestrator


@pytest.fixture
def stub_pipeline():
    with patch.object(ScanOrchestrator, "run_pipeline", new=AsyncMock(return_value=ScanStatus.pending)) as mock:
        yield mock


def test_create_scan_returns_pending(auth_client, stub_pipeline):
    response = auth_client.post("/api/v1/scans", json={"url": "  example.com  "})

    assert response.status_code == 201
    payload = response.json()
    assert payload["status"] == "success"
    scan = payload["data"]
    assert scan["status"] == "pending"
    assert scan["url"] == "example.com"
    assert scan["report_url"] is None
    assert scan["created_at"]
    assert set(scan) == {"id", "user_id", "url", "status", "report_url", "created_at"}


def test_create_scan_starts_pipeline(auth_client, stub_pipeline):
    response = auth_client.post("/api/v1/scans", json={"url": "test-accessible"})

    scan = response.json()["data"]
    stub_pipeline.assert_called_once()
    _, user_id, url = stub_pipeline.call_args.args
    assert user_id == scan["user_id"]
    assert url == "test-accessible"


def test_list_scans_only_returns_own_scans(auth_client, stub_pipeline):
    created = auth_client.post("/api/v1/scans", json={"url": "https://example.org"}).json()["data"]

    response = auth_client.get("/api/v1/scans")

    assert response.status_code == 200
    scans = response.json()["data"]
    assert created["id"] in [s["id"] for s in scans]
    assert {s["user_id"] for s in scans} == {created["user_id"]}
    # newest first
    created_at = [s["created_at"] for s in scans]
    assert created_at == sorted(created_at, reverse=True)


@pytest.mark.parametrize(
    "body",
    [{}, {"url": ""}, {"url": "ftp://example.com"}, {"url": "https://example.com/" + "a" * 2048}, {"url": 42}],
)
def test_invalid_body_is_rejected(auth_client, stub_pipeline, body):
    response = auth_client.post("/api/v1/scans", json=body)

    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"
    stub_pipeline.assert_not_called()


def test_unauthenticated_scan_is_rejected(client, stub_pipeline):
    response = client.post("/api/v1/scans", json={"url": "example.com"})

    assert response.status_code == 401
    stub_pipeline.assert_not_called()


def test_unexpected_error_returns_500(test_app, auth_client):
    with patch.object(ScanOrchestrator, "submit", new=AsyncMock(side_effect=RuntimeError("db down"))):
        with TestClient(test_app, raise_server_exceptions=False) as client:
            response = client.post("/api/v1/scans", json={"url": "example.com"})

    assert response.status_code == 500
    assert response.json()["message"] == "Internal server error"
