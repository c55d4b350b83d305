"""Tests for settings, web app discovery, the script bridge and the server entry point."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ifc_bridge.infrastructure.host import HostExecutor
from ifc_bridge.infrastructure.webapp import VIRTUAL_HOST_URL, resolve_web_app_url
from ifc_bridge.presentation.script_bridge import ScriptBridge
from ifc_bridge.presentation.server import build_app, create_dispatcher, parse_args
from ifc_bridge.shared.config import DEFAULT_PORTS, Settings
from ifc_bridge.shared.logging import configure_logging, get_logger

WALL_GUID = "2XQ$n5SLP5MBLyL442paFx"


class TestSettings:
    """Tests for Settings."""

    @pytest.mark.parametrize("host_kind", ["revit", "archicad", "rhino", "ifc"])
    def test_default_port_per_host(self, host_kind: str) -> None:
        settings = Settings(host_kind=host_kind)
        assert settings.port == DEFAULT_PORTS[host_kind]

    def test_explicit_port_wins(self) -> None:
        settings = Settings(host_kind="revit", port=50000)
        assert settings.base_url == "http://localhost:50000"

    def test_status_budget(self) -> None:
        settings = Settings(
            status_timeout=10,
            status_retry_timeout=5,
            status_max_retries=3,
            status_retry_base_delay=1,
        )
        # 10 + 3 x 5 + (1 + 2 + 4)
        assert settings.status_probe_budget == 32.0

    def test_status_budget_without_retries(self) -> None:
        assert Settings(status_timeout=4, status_max_retries=0).status_probe_budget == 4.0

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IFC_BRIDGE_HOST_KIND", "archicad")
        monkeypatch.setenv("IFC_BRIDGE_EXPORT_TIMEOUT", "120")
        settings = Settings()
        assert settings.host_display_name == "Archicad"
        assert settings.port == 48882
        assert settings.export_timeout == 120.0


class TestWebApp:
    """Tests for web app URL resolution."""

    def test_explicit_url(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"web_app_url": "https://viewer.example/"})
        location = resolve_web_app_url(settings)
        assert location.url == "https://viewer.example/"
        assert location.source == "settings"

    def test_user_config_file(self, test_settings: Settings) -> None:
        Path(test_settings.user_config_file).write_text("http://localhost:3000/\n", encoding="utf-8")
        location = resolve_web_app_url(test_settings)
        assert location.url == "http://localhost:3000/"
        assert not location.uses_dev_server

    def test_blank_user_config_is_ignored(self, test_settings: Settings) -> None:
        Path(test_settings.user_config_file).write_text("  \n", encoding="utf-8")
        assert resolve_web_app_url(test_settings).source == "dev-server"

    def test_bundled_folder(self, test_settings: Settings, tmp_path: Path) -> None:
        folder = tmp_path / "web"
        folder.mkdir()
        settings = test_settings.model_copy(update={"web_app_folder": str(folder)})
        location = resolve_web_app_url(settings)
        assert location.url == VIRTUAL_HOST_URL
        assert location.source == "bundled"

    def test_dev_server_fallback(self, test_settings: Settings) -> None:
        location = resolve_web_app_url(test_settings)
        assert location.url == "http://localhost:5173/"
        assert location.uses_dev_server


class TestScriptBridge:
    """Tests for the in-process script bridge."""

    @pytest.fixture
    def bridge(self, fake_adapter, executor: HostExecutor, test_settings: Settings) -> ScriptBridge:
        return ScriptBridge(fake_adapter, executor, test_settings)

    def test_host_info(self, bridge: ScriptBridge) -> None:
        assert bridge.get_host_info() == ["Revit", "http://localhost:5173/", True]

    def test_select_and_read_selection(self, bridge: ScriptBridge) -> None:
        assert bridge.get_selected_elements() == []
        assert bridge.select_element_by_guid(WALL_GUID) is True
        assert bridge.get_selected_elements() == [
            {"id": 42, "globalId": WALL_GUID, "name": "Basic Wall", "ifcClass": "IfcWall"},
        ]

    @pytest.mark.parametrize("guid", ["", "   ", None, 42])
    def test_invalid_guid(self, bridge: ScriptBridge, fake_adapter, guid: object) -> None:
        assert bridge.select_element_by_guid(guid) is False
        assert fake_adapter.calls == []

    def test_unknown_guid(self, bridge: ScriptBridge) -> None:
        assert bridge.select_element_by_guid("0000000000000000000000") is False

    def test_busy_host_never_raises(self, bridge: ScriptBridge, fake_adapter) -> None:
        fake_adapter.block()
        assert bridge.select_element_by_guid(WALL_GUID) is False
        assert bridge.get_selected_elements() == []

    def test_script_object(self, bridge: ScriptBridge) -> None:
        functions = bridge.as_script_object()
        assert set(functions) == {
            "GetHostInfo",
            "GetSelectedElements",
            "SelectElementByGuid",
            "RefreshSelection",
        }
        assert functions["SelectElementByGuid"](WALL_GUID) is True


class TestServer:
    """Tests for the server entry point."""

    def test_parse_args(self) -> None:
        args = parse_args(["--ifc-file", "model.ifc", "--port", "49000", "--host-kind", "rhino"])
        assert args.ifc_file == "model.ifc"
        assert args.port == 49000
        assert args.host_kind == "rhino"
        assert args.bind_host is None

    def test_parse_args_rejects_unknown_host(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--host-kind", "sketchup"])

    def test_create_dispatcher(self, test_settings: Settings, fake_adapter) -> None:
        dispatcher = create_dispatcher(test_settings, fake_adapter)
        assert dispatcher.adapter is fake_adapter
        assert dispatcher.executor.name == "revit-main"
        assert not dispatcher.executor.is_running

    def test_build_app_with_ifc_file(self, test_settings: Settings, ifc_model, tmp_path: Path) -> None:
        path = tmp_path / "model.ifc"
        ifc_model.write(str(path))
        settings = test_settings.model_copy(update={"ifc_file": str(path)})

        app = build_app(settings)

        assert app.state.dispatcher.adapter.host_name == "IFC"


class TestLogging:
    """Tests for logging configuration."""

    def test_reconfigure_replaces_handlers(self, tmp_path: Path) -> None:
        root = logging.getLogger()
        before = list(root.handlers)
        log_file = tmp_path / "bridge.log"

        try:
            configure_logging(level="DEBUG", log_format="json", log_file=str(log_file))
            configured = [h for h in root.handlers if h not in before]
            assert len(configured) == 2
            assert root.level == logging.DEBUG

            get_logger("tests").info("Bridge event", element_id=42)
            configured[1].flush()
            assert '"element_id": 42' in log_file.read_text(encoding="utf-8")

            configure_logging(level="WARNING", log_format="console")
            assert [h for h in root.handlers if h not in before] != configured
            assert len([h for h in root.handlers if h not in before]) == 1
            assert root.level == logging.WARNING
        finally:
            configure_logging(level="INFO")
