"""Pytest configuration and fixtures."""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Generator

import ifcopenshell
import ifcopenshell.guid
import pytest

from ifc_bridge.application.services import CommandDispatcher
from ifc_bridge.domain.adapters import HostFailure, HostResult
from ifc_bridge.domain.models import ElementInfo, ExportConfiguration
from ifc_bridge.domain.value_objects import GlobalId
from ifc_bridge.infrastructure.host import HostExecutor
from ifc_bridge.shared.config import Settings
from ifc_bridge.shared.result import err, ok

WALL_GUID = "2XQ$n5SLP5MBLyL442paFx"
IFC_PAYLOAD = b"ISO-10303-21;\nHEADER;\nENDSEC;\nDATA;\nENDSEC;\nEND-ISO-10303-21;\n"


class FakeHostAdapter:
    """Scriptable host adapter.

    ``block()`` makes every call wait until ``release()``, which simulates
    a host whose main thread is busy.
    """

    host_name = "Revit"

    def __init__(self) -> None:
        self.elements = {42: ElementInfo(42, WALL_GUID, "Basic Wall", "IfcWall")}
        self.configurations: list[str] = ["Default", "IFC4 Reference View"]
        self.configurations_failure: str | None = None
        self.export_failure: str | None = None
        self.export_payload: bytes | None = IFC_PAYLOAD
        self.raise_on_select: Exception | None = None
        self.calls: list[str] = []
        self.exported: list[tuple[str, Path]] = []
        self.selected: list[ElementInfo] = []
        self._gate = threading.Event()
        self._gate.set()

    def block(self) -> None:
        self._gate.clear()

    def release(self) -> None:
        self._gate.set()

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        self._gate.wait(5)

    def select_by_id(self, native_id: int) -> HostResult[ElementInfo]:
        self._enter("select_by_id")
        if self.raise_on_select is not None:
            raise self.raise_on_select
        info = self.elements.get(native_id)
        if info is None:
            return err(HostFailure(f"Element {native_id} not found", not_found=True))
        self.selected = [info]
        return ok(info)

    def select_by_global_id(self, global_id: GlobalId) -> HostResult[ElementInfo]:
        self._enter("select_by_global_id")
        for info in self.elements.values():
            if global_id.matches(info.global_id):
                self.selected = [info]
                return ok(info)
        return err(HostFailure(f"Element with GUID {global_id} not found", not_found=True))

    def list_configurations(self) -> HostResult[list[str]]:
        self._enter("list_configurations")
        if self.configurations_failure:
            return err(HostFailure(self.configurations_failure))
        return ok(list(self.configurations))

    def export_ifc(self, configuration: ExportConfiguration, output_path: Path) -> HostResult[Path]:
        self._enter("export_ifc")
        self.exported.append((configuration.name, output_path))
        if self.export_failure:
            return err(HostFailure(self.export_failure))
        if self.export_payload is not None:
            output_path.write_bytes(self.export_payload)
        return ok(output_path)

    def get_selected_elements(self) -> HostResult[list[ElementInfo]]:
        self._enter("get_selected_elements")
        return ok(list(self.selected))


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with short budgets and an isolated export directory."""
    return Settings(
        host_kind="revit",
        export_dir=str(tmp_path / "exports"),
        user_config_file=str(tmp_path / "webapp.config"),
        status_timeout=0.5,
        status_retry_timeout=0.2,
        status_max_retries=2,
        status_retry_base_delay=0.01,
        status_unavailable_delay=0.0,
        select_by_id_timeout=0.3,
        select_by_guid_timeout=0.3,
        configurations_timeout=0.3,
        export_timeout=0.3,
        log_level="DEBUG",
    )


@pytest.fixture
def fake_adapter() -> FakeHostAdapter:
    return FakeHostAdapter()


@pytest.fixture
def executor(fake_adapter: FakeHostAdapter) -> Generator[HostExecutor, None, None]:
    """Running host executor; unblocks the fake host before shutdown."""
    host_executor = HostExecutor(name="test-main")
    host_executor.start()
    yield host_executor
    fake_adapter.release()
    host_executor.stop(timeout=2.0)


@pytest.fixture
def dispatcher(
    executor: HostExecutor,
    test_settings: Settings,
    fake_adapter: FakeHostAdapter,
) -> CommandDispatcher:
    return CommandDispatcher(executor, test_settings, fake_adapter)


@pytest.fixture
def detached_dispatcher(executor: HostExecutor, test_settings: Settings) -> CommandDispatcher:
    """Dispatcher whose host has not attached an adapter yet."""
    return CommandDispatcher(executor, test_settings)


@pytest.fixture
def ifc_model() -> ifcopenshell.file:
    """Small IFC4 model with a project and one wall."""
    model = ifcopenshell.file(schema="IFC4")
    model.createIfcProject(ifcopenshell.guid.new(), None, "Demo Project")
    model.createIfcWall(WALL_GUID, None, "Wall A")
    return model
