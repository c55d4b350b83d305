"""Host bridge client.

Async wrapper around the bridge's HTTP surface for UI code. Every call
returns a ClientResult and reports a user-facing message through the
Notifier; bridge failures never raise.
"""
from __future__ import annotations

import asyncio
import re
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generic, TypeVar
from urllib.parse import quote

import httpx

from ifc_bridge.client.state import ConnectionState, Notifier
from ifc_bridge.domain import GlobalId
from ifc_bridge.infrastructure.ifc.auditor import AuditReport, audit_file
from ifc_bridge.shared.config import Settings, get_settings
from ifc_bridge.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

FILENAME_PATTERN = re.compile(r'filename="?([^";]+)"?')

# Extra client wait on top of the server's own budget for an operation
RESPONSE_SLACK_SECONDS = 5.0


@dataclass(frozen=True)
class ClientResult(Generic[T]):
    """Outcome of a client call.

    ``ambiguous`` marks a request that may have reached the host even
    though no response was received.
    """

    success: bool
    message: str
    value: T | None = None
    ambiguous: bool = False
    error: str | None = None


@dataclass(frozen=True)
class ExportedFile:
    """IFC file returned by the host."""

    name: str
    content: bytes

    def save(self, directory: str | Path) -> Path:
        path = Path(directory) / self.name
        path.write_bytes(self.content)
        return path


def error_kind(status_code: int) -> str:
    """Map a bridge HTTP status onto the error taxonomy."""
    if status_code == 400:
        return "InvalidArgument"
    if status_code == 503:
        return "ServiceUnavailable"
    if status_code == 404:
        return "NotFound"
    return "OperationFailed"


def json_body(response: httpx.Response) -> Any:
    """Decoded JSON body, or None when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


def error_message(response: httpx.Response) -> str:
    data = json_body(response)
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP {response.status_code}: {response.reason_phrase}"


def filename_from_response(response: httpx.Response) -> str:
    disposition = response.headers.get("Content-Disposition")
    if disposition:
        match = FILENAME_PATTERN.search(disposition)
        if match:
            return match.group(1)
    stamp = datetime.now().isoformat().replace(":", "-").replace(".", "-")
    return f"Export_{stamp}.ifc"


class HostBridgeClient:
    """Client proxy for one host bridge.

    Example:
        >>> state = ConnectionState.for_page("http://localhost:5173/", host="revit")
        >>> async with HostBridgeClient(state) as client:
        ...     await client.connect()
        ...     await client.select_element("2XQ$n5SLP5MBLyL442paFx")
    """

    def __init__(
        self,
        state: ConnectionState,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.state = state
        self.settings = settings or get_settings()
        self.notifier = notifier or Notifier()
        self._http = httpx.AsyncClient(
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> HostBridgeClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _url(self, path: str) -> str:
        return f"{self.state.api_url}{path}"

    def _fail(self, message: str, error: str, value: Any = None) -> ClientResult[Any]:
        self.notifier.error(message)
        return ClientResult(False, message, value=value, error=error)

    def _not_connected(self, value: Any = None) -> ClientResult[Any] | None:
        if not self.state.api_url or not self.state.connected:
            return self._fail(f"Not connected to {self.state.host_name}", "ServiceUnavailable", value)
        return None

    # =========================================================================
    # Connection
    # =========================================================================

    async def connect(self) -> ClientResult[dict[str, Any]]:
        """Check the bridge status endpoint and mark the state connected."""
        host = self.state.host_name
        if not self.state.api_url:
            return self._fail(f"No {host} API URL provided", "InvalidArgument")

        self.state.loading = True
        try:
            response = await self._http.get(
                self._url("/status"),
                timeout=self.settings.status_probe_budget + RESPONSE_SLACK_SECONDS,
            )
        except httpx.TimeoutException:
            self.state.connected = False
            return self._fail(
                f"Connection timeout. {host} API server may be down or unresponsive.",
                "Timeout",
            )
        except httpx.TransportError as e:
            self.state.connected = False
            logger.debug("Status request failed", error=str(e))
            return self._fail(
                f"Cannot connect to {host} API server. Check that the add-in is loaded.",
                "ServiceUnavailable",
            )
        finally:
            self.state.loading = False

        if not response.is_success:
            self.state.connected = False
            return self._fail(
                f"Failed to connect to {host}: {error_message(response)}",
                error_kind(response.status_code),
            )

        status = json_body(response)
        if not isinstance(status, dict):
            self.state.connected = False
            return self._fail(
                f"Failed to connect to {host}: unexpected status response", "OperationFailed",
            )

        self.state.connected = True
        message = f"Connected to {host}"
        if not status.get("configsReady"):
            message += " (host still initializing)"
        self.notifier.success(message)
        return ClientResult(True, message, value=status)

    def disconnect(self) -> ClientResult[None]:
        self.state.reset()
        message = f"Disconnected from {self.state.host_name}"
        self.notifier.success(message)
        return ClientResult(True, message)

    # =========================================================================
    # Selection
    # =========================================================================

    async def select_element(self, global_id: Any) -> ClientResult[None]:
        """Select an element in the host by GlobalId.

        A network-level failure after a successful status check is reported
        as an ambiguous success: the request may well have reached the host.
        """
        gid = GlobalId.from_string(global_id) if isinstance(global_id, str) else None
        if gid is None or gid.value == "-":
            return self._fail(f"Invalid GlobalId: {global_id}", "InvalidArgument")

        failure = self._not_connected()
        if failure is not None:
            return failure

        host = self.state.host_name
        url = self._url(f"/select-by-guid/{quote(gid.value, safe='')}")
        try:
            response = await self._http.get(url, timeout=self.settings.select_by_guid_timeout)
        except httpx.TimeoutException:
            return self._fail(
                f"Request timed out. {host} API server may be down.", "Timeout",
            )
        except httpx.TransportError as e:
            logger.info("Selection outcome unknown", global_id=gid.value, error=str(e))
            message = f"Selection request for GUID {gid} sent to {host}"
            self.notifier.success(message)
            return ClientResult(True, message, ambiguous=True)

        if not response.is_success:
            return self._fail(
                f"Failed to select element: {error_message(response)}",
                error_kind(response.status_code),
            )

        message = f"Element with GUID {gid} selected in {host}"
        self.notifier.success(message)
        return ClientResult(True, message)

    # =========================================================================
    # Export
    # =========================================================================

    async def get_ifc_configurations(self) -> ClientResult[list[str]]:
        failure = self._not_connected(value=[])
        if failure is not None:
            return failure

        try:
            response = await self._http.get(
                self._url("/ifc-configurations"), timeout=self.settings.configurations_timeout,
            )
        except httpx.TimeoutException:
            return self._fail("Failed to get IFC configurations: timeout", "Timeout", [])
        except httpx.TransportError as e:
            return self._fail(f"Failed to get IFC configurations: {e}", "ServiceUnavailable", [])

        if not response.is_success:
            return self._fail(
                f"Failed to get IFC configurations: {error_message(response)}",
                error_kind(response.status_code),
                [],
            )

        data = json_body(response)
        configurations = data.get("configurations") if isinstance(data, dict) else None
        if not isinstance(configurations, list):
            return self._fail(
                "Failed to get IFC configurations: unexpected response", "OperationFailed", [],
            )

        return ClientResult(True, f"{len(configurations)} IFC configurations", value=configurations)

    async def export_ifc(self, configuration_name: Any) -> ClientResult[ExportedFile]:
        """Export the host model and download the IFC file."""
        failure = self._not_connected()
        if failure is not None:
            return failure

        if not isinstance(configuration_name, str) or not configuration_name.strip():
            return self._fail("Invalid IFC configuration name", "InvalidArgument")

        try:
            response = await self._http.post(
                self._url("/export-ifc"),
                json={"configuration": configuration_name},
                timeout=self.settings.export_timeout + RESPONSE_SLACK_SECONDS,
            )
        except httpx.TimeoutException:
            return self._fail("Failed to export IFC: timeout", "Timeout")
        except httpx.TransportError as e:
            return self._fail(f"Failed to export IFC: {e}", "ServiceUnavailable")

        if not response.is_success:
            return self._fail(
                f"Failed to export IFC: {error_message(response)}",
                error_kind(response.status_code),
            )

        exported = ExportedFile(filename_from_response(response), response.content)
        message = f"IFC exported successfully: {exported.name}"
        self.notifier.success(message)
        return ClientResult(True, message, value=exported)

    # =========================================================================
    # Audit
    # =========================================================================

    async def audit_host_model(
        self, configuration_name: str, ids_path: str | Path,
    ) -> ClientResult[AuditReport]:
        """Export the host model and audit it against an IDS document."""
        failure = self._not_connected()
        if failure is not None:
            return failure

        self.state.auditing = True
        try:
            export = await self.export_ifc(configuration_name)
            if not export.success or export.value is None:
                return ClientResult(False, export.message, error=export.error)

            with tempfile.TemporaryDirectory(prefix="ifc_bridge_audit_") as tmp:
                ifc_path = export.value.save(tmp)
                try:
                    report = await asyncio.to_thread(audit_file, ifc_path, ids_path)
                except Exception as e:
                    logger.exception("IDS audit failed", ids=str(ids_path))
                    return self._fail(
                        f"Failed to run {self.state.host_name} audit: {e}", "OperationFailed",
                    )
        finally:
            self.state.auditing = False

        verdict = "passed" if report.passed else f"{len(report.failed_specifications)} failed"
        message = f"Audit completed ({self.state.host_name}): {verdict}"
        self.notifier.success(message)
        return ClientResult(True, message, value=report)
