"""Tests for API routes."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from conftest import FakeConnector
from fastapi.testclient import TestClient
from hmrfix.api.routes import get_dispatcher
from hmrfix.app import create_app
from hmrfix.core.errors import CaptureError, CaptureTimeoutError, SandboxConnectionError
from hmrfix.core.model import CaptureResult
from hmrfix.core.remediate.dispatcher import RemediationDispatcher


class TestAutoFixRoutes:
    @pytest.fixture
    def connector(self):
        return FakeConnector()

    @pytest.fixture
    def client(self, connector):
        app = create_app()
        app.dependency_overrides[get_dispatcher] = lambda: RemediationDispatcher(connector)
        return TestClient(app)

    def test_installs_missing_package(self, client, connector):
        response = client.post(
            "/auto-fix-errors",
            json={"sandboxId": "sb1", "errors": [{"type": "npm-missing", "package": "left-pad"}]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Auto-fixed 1/1 errors"
        assert data["summary"] == {"total": 1, "fixed": 1, "failed": 0}
        result = data["results"][0]
        assert result["command"] == "npm install left-pad"
        assert result["success"] is True
        assert result["error"] == {"type": "npm-missing", "message": "", "package": "left-pad"}
        assert "errorOutput" in result
        assert connector.handle.commands == [("npm install left-pad", 30000)]

    def test_syntax_error_needs_manual_review(self, client, connector):
        response = client.post(
            "/auto-fix-errors",
            json={"sandboxId": "sb1", "errors": [{"type": "syntax-error", "message": "x"}]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["summary"] == {"total": 1, "fixed": 0, "failed": 1}
        assert data["results"][0]["success"] is False
        assert "manual review" in data["results"][0]["description"]
        assert connector.handle.commands == []

    def test_unknown_type_is_accepted_and_reported(self, client):
        response = client.post(
            "/auto-fix-errors",
            json={"sandboxId": "sb1", "errors": [{"type": "weird", "message": "x"}]},
        )
        assert response.status_code == 200
        assert response.json()["results"][0]["description"] == "Unknown error type: weird"

    def test_missing_sandbox_id(self, client, connector):
        response = client.post(
            "/auto-fix-errors", json={"errors": [{"type": "npm-missing", "package": "x"}]}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Sandbox ID is required"
        assert connector.connected == []

    def test_missing_errors(self, client, connector):
        response = client.post("/auto-fix-errors", json={"sandboxId": "sb1"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Errors array is required"
        assert connector.connected == []

    def test_errors_not_a_list(self, client, connector):
        response = client.post("/auto-fix-errors", json={"sandboxId": "sb1", "errors": "oops"})
        assert response.status_code == 422
        assert connector.connected == []

    def test_connection_failure_is_server_error(self):
        app = create_app()
        failing = FakeConnector(fail_with=SandboxConnectionError("sb1", "sandbox not found"))
        app.dependency_overrides[get_dispatcher] = lambda: RemediationDispatcher(failing)
        response = TestClient(app).post(
            "/auto-fix-errors",
            json={"sandboxId": "sb1", "errors": [{"type": "npm-missing", "package": "x"}]},
        )
        assert response.status_code == 500
        assert "sandbox not found" in response.json()["detail"]

    def test_common_fixes(self, client, connector):
        response = client.post("/auto-fix-errors/common", json={"sandboxId": "sb1"})
        assert response.status_code == 200
        assert response.json()["summary"]["total"] == 3
        assert connector.handle.commands[0][0] == "npm install react react-dom"

    def test_common_fixes_requires_sandbox(self, client):
        response = client.post("/auto-fix-errors/common", json={})
        assert response.status_code == 400


class TestScreenshotRoute:
    @pytest.fixture
    def client(self):
        return TestClient(create_app())

    def test_capture_success(self, client):
        with patch("hmrfix.api.routes.capture_with_retry") as mock_capture:
            mock_capture.return_value = CaptureResult(
                screenshot="aGVsbG8=", metadata={"title": "Preview"}
            )
            response = client.post("/scrape-screenshot", json={"url": "https://example.com"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "screenshot": "aGVsbG8=",
            "metadata": {"title": "Preview"},
        }

    def test_missing_url(self, client):
        response = client.post("/scrape-screenshot", json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "URL is required"

    def test_timeout_failure(self, client):
        with patch("hmrfix.api.routes.capture_with_retry") as mock_capture:
            mock_capture.side_effect = CaptureTimeoutError("Screenshot capture timed out.")
            response = client.post("/scrape-screenshot", json={"url": "https://example.com"})
        assert response.status_code == 500
        assert "timed out" in response.json()["detail"]

    def test_generic_failure(self, client):
        with patch("hmrfix.api.routes.capture_with_retry") as mock_capture:
            mock_capture.side_effect = CaptureError("Screenshot capture failed: boom")
            response = client.post("/scrape-screenshot", json={"url": "https://example.com"})
        assert response.status_code == 500
        assert response.json()["detail"] == "Screenshot capture failed: boom"


def test_healthz():
    response = TestClient(create_app()).get("/healthz")
    assert response.json() == {"status": "ok"}
