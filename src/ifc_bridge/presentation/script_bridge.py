"""In-process script bridge.

Alternative transport for hosts whose browser control lets the page call
host objects directly. Calls are synchronous, share the host execution
queue with the HTTP transport and never raise into the script context.
"""
from __future__ import annotations

from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable

from ifc_bridge.domain.adapters import HostAdapter, guarded
from ifc_bridge.domain.value_objects import GlobalId
from ifc_bridge.infrastructure.host.executor import HostExecutor
from ifc_bridge.infrastructure.webapp import resolve_web_app_url
from ifc_bridge.shared.config import Settings
from ifc_bridge.shared.logging import get_logger

logger = get_logger(__name__)


class ScriptBridge:
    """Host object exposed to the embedded page.

    Example:
        >>> bridge = ScriptBridge(adapter, executor, settings)
        >>> browser.register("hostBridge", bridge.as_script_object())
    """

    def __init__(self, adapter: HostAdapter, executor: HostExecutor, settings: Settings) -> None:
        self.adapter = adapter
        self.executor = executor
        self.settings = settings

    def _run(self, operation: str, fn: Callable[..., Any], *args: Any, timeout: float) -> Any:
        try:
            future = self.executor.submit(guarded(operation, fn), *args, name=operation)
        except RuntimeError as e:
            logger.warning("Script bridge call rejected", operation=operation, error=str(e))
            return None
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.warning("Script bridge call timed out", operation=operation, timeout=timeout)
            return None

    def get_host_info(self) -> list[Any]:
        """Return [host name, web app URL, uses dev server]."""
        location = resolve_web_app_url(self.settings)
        return [self.settings.host_display_name, location.url, location.uses_dev_server]

    def get_selected_elements(self) -> list[dict[str, Any]]:
        result = self._run(
            "selected-elements",
            self.adapter.get_selected_elements,
            timeout=self.settings.select_by_id_timeout,
        )
        if result is None:
            return []
        return [element.to_dict() for element in result.unwrap_or([])]

    def select_element_by_guid(self, guid: Any) -> bool:
        global_id = GlobalId.from_string(guid) if isinstance(guid, str) else None
        if global_id is None:
            return False
        result = self._run(
            "select-by-guid",
            self.adapter.select_by_global_id,
            global_id,
            timeout=self.settings.select_by_guid_timeout,
        )
        return result is not None and result.is_success()

    def as_script_object(self) -> dict[str, Callable[..., Any]]:
        """Functions under the names the page calls."""
        return {
            "GetHostInfo": self.get_host_info,
            "GetSelectedElements": self.get_selected_elements,
            "SelectElementByGuid": self.select_element_by_guid,
            "RefreshSelection": self.get_selected_elements,
        }
