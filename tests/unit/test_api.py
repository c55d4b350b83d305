"""Tests for the HTTP transport."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ifc_bridge.application.services import CommandDispatcher
from ifc_bridge.presentation.api import create_app

WALL_GUID = "2XQ$n5SLP5MBLyL442paFx"


@pytest.fixture
def client(dispatcher: CommandDispatcher) -> TestClient:
    return TestClient(create_app(dispatcher, manage_executor=False), raise_server_exceptions=False)


@pytest.fixture
def detached_client(detached_dispatcher: CommandDispatcher) -> TestClient:
    return TestClient(create_app(detached_dispatcher, manage_executor=False))


def assert_cors(response) -> None:
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"


class TestCors:
    """Tests for the permissive CORS layer."""

    def test_cors_on_success(self, client: TestClient) -> None:
        assert_cors(client.get("/status"))

    @pytest.mark.parametrize("path", ["/export-ifc", "/status", "/no-such-route"])
    def test_preflight(self, client: TestClient, path: str) -> None:
        response = client.options(path)
        assert response.status_code == 200
        assert response.content == b""
        assert_cors(response)

    def test_cors_on_errors(self, client: TestClient) -> None:
        assert_cors(client.get("/select-by-id/abc"))
        assert_cors(client.get("/no-such-route"))


class TestRoutes:
    """Tests for the bridge endpoints."""

    def test_status(self, client: TestClient) -> None:
        response = client.get("/status")
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "connected": True,
            "configsReady": True,
            "version": "1.0.0",
        }

    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/no-such-route")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    def test_select_by_id(self, client: TestClient) -> None:
        response = client.get("/select-by-id/42")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Element 42 selected"}

    @pytest.mark.parametrize("path", ["/select-by-id/abc", "/select-by-id/-5", "/select-by-id/"])
    def test_select_by_id_invalid(self, client: TestClient, path: str) -> None:
        response = client.get(path)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid element ID"}

    def test_select_by_id_not_found(self, client: TestClient) -> None:
        response = client.get("/select-by-id/99")
        assert response.status_code == 500
        assert response.json() == {"error": "Element 99 not found or selection failed"}

    def test_select_by_guid_is_url_decoded(self, client: TestClient) -> None:
        response = client.get("/select-by-guid/2XQ%24n5SLP5MBLyL442paFx")
        assert response.status_code == 200
        assert response.json()["message"] == f"Element with GUID {WALL_GUID} selected"

    def test_select_by_guid_blank(self, client: TestClient, fake_adapter) -> None:
        response = client.get("/select-by-guid/%20%20")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid GUID"}
        assert fake_adapter.calls == []

    def test_selection_timeout(self, client: TestClient, fake_adapter) -> None:
        fake_adapter.block()
        response = client.get(f"/select-by-guid/{WALL_GUID.replace('$', '%24')}")
        assert response.status_code == 500
        assert "timed out" in response.json()["error"]

    def test_ifc_configurations(self, client: TestClient) -> None:
        response = client.get("/ifc-configurations")
        assert response.status_code == 200
        assert response.json() == {"configurations": ["Default", "IFC4 Reference View"]}

    def test_ifc_configurations_fallback(self, client: TestClient, fake_adapter) -> None:
        fake_adapter.configurations_failure = "exporter missing"
        response = client.get("/ifc-configurations")
        assert response.json() == {"configurations": ["Default", "IFC2x3", "IFC4"]}

    def test_host_unavailable(self, detached_client: TestClient) -> None:
        response = detached_client.get("/ifc-configurations")
        assert response.status_code == 503
        assert response.json() == {"error": "Revit application not available"}
        assert_cors(response)

    def test_unexpected_error(self, client: TestClient, dispatcher: CommandDispatcher, monkeypatch) -> None:
        async def broken() -> None:
            raise KeyError("state")

        monkeypatch.setattr(dispatcher, "get_status", broken)
        response = client.get("/status")
        assert response.status_code == 500
        assert response.json()["error"].startswith("Internal Server Error")
        assert_cors(response)


class TestExportRoute:
    """Tests for POST /export-ifc."""

    def test_export(self, client: TestClient, fake_adapter) -> None:
        response = client.post("/export-ifc", json={"configuration": "IFC4 Reference View"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/octet-stream"
        assert response.content == fake_adapter.export_payload
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="Export_Revit_')
        assert disposition.endswith('.ifc"')
        assert_cors(response)

    def test_export_file_is_removed_after_transfer(self, client: TestClient, fake_adapter) -> None:
        client.post("/export-ifc", json={"configuration": "Default"})
        _, staged = fake_adapter.exported[0]
        assert not staged.exists()

    def test_export_missing_configuration(self, client: TestClient) -> None:
        response = client.post("/export-ifc", json={"other": 1})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing 'configuration' parameter"}

    def test_export_empty_body(self, client: TestClient) -> None:
        response = client.post("/export-ifc")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing 'configuration' parameter"}

    def test_export_bad_json(self, client: TestClient) -> None:
        response = client.post(
            "/export-ifc",
            content=b"{configuration:",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_export_blank_configuration(self, client: TestClient) -> None:
        response = client.post("/export-ifc", json={"configuration": "  "})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid IFC configuration name"}

    def test_export_failure(self, client: TestClient, fake_adapter) -> None:
        fake_adapter.export_failure = "Exporter crashed"
        response = client.post("/export-ifc", json={"configuration": "Default"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to export IFC: Exporter crashed"}

    def test_get_export_not_allowed(self, client: TestClient) -> None:
        response = client.get("/export-ifc")
        assert response.status_code == 405
        assert "error" in response.json()
