"""Unit tests for the health and version endpoints.

These tests verify the router behavior with a mocked service.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from src.draughtsman import project
from src.draughtsman.api.http.app import create_app
from src.draughtsman.service.deployer.base import DeployerState


@pytest.fixture
def mock_service() -> MagicMock:
    """Create a mock service whose deployer loop is running."""
    service = MagicMock()
    service.config.environment = "production"
    service.state.return_value = DeployerState(
        running=True,
        in_flight=False,
        last_tick_at=datetime(2024, 1, 1, 12, 0, tzinfo=UTC),
        last_error=None,
    )
    return service


@pytest.fixture
def client(mock_service: MagicMock) -> TestClient:
    return TestClient(create_app(mock_service, boot=False))


class TestLiveness:
    def test_always_healthy(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestReadiness:
    def test_ready_when_loop_runs(self, client: TestClient) -> None:
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["environment"] == "production"
        assert body["deployer"]["running"] is True
        assert body["deployer"]["last_tick_at"].startswith("2024-01-01T12:00:00")

    def test_not_ready_when_loop_stopped(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.state.return_value = DeployerState(
            running=False, in_flight=False, last_tick_at=None, last_error=None
        )

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_poll_error_reported_but_still_ready(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        """A failing poll is surfaced without failing the readiness probe."""
        mock_service.state.return_value = DeployerState(
            running=True, in_flight=True, last_tick_at=None, last_error="Unable to reach GitHub"
        )

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["deployer"]["last_error"] == "Unable to reach GitHub"


class TestVersion:
    def test_reports_build_information(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DRAUGHTSMAN_GIT_COMMIT", "5d2c7a1")

        body = client.get("/version").json()

        assert body["name"] == project.NAME
        assert body["version"] == project.VERSION
        assert body["git_commit"] == "5d2c7a1"


class TestLifespan:
    def test_boots_and_shuts_down_service(self, mock_service: MagicMock) -> None:
        with TestClient(create_app(mock_service)):
            mock_service.boot.assert_called_once()
            mock_service.shutdown.assert_not_called()

        mock_service.shutdown.assert_called_once()

    def test_boot_disabled(self, mock_service: MagicMock) -> None:
        with TestClient(create_app(mock_service, boot=False)):
            pass

        mock_service.boot.assert_not_called()
        mock_service.shutdown.assert_not_called()
