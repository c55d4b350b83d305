"""Command Dispatcher.

Validates bridge requests, hands host-touching work to the host execution
queue, waits for the completion signal within each operation's budget and
converts host outcomes into bridge responses or errors.
"""
from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any, Callable

from ifc_bridge.domain import (
    FALLBACK_CONFIGURATIONS,
    BridgeStatus,
    ElementNotFoundError,
    ElementReference,
    ExportConfiguration,
    ExportFailedError,
    ExportResult,
    GlobalId,
    InvalidArgumentError,
    MissingParameterError,
    OperationFailedError,
    OperationTimeoutError,
    ReadinessFlag,
    ServiceUnavailableError,
)
from ifc_bridge.domain.adapters import HostAdapter, HostFailure, guarded
from ifc_bridge.domain.models import export_file_name, with_fallback
from ifc_bridge.infrastructure.host.executor import HostExecutor
from ifc_bridge.shared.config import Settings
from ifc_bridge.shared.logging import get_logger
from ifc_bridge.shared.result import Failure, Success

logger = get_logger(__name__)

NATIVE_ID_PATTERN = re.compile(r"^\d+$")


def parse_native_id(raw: str | int) -> int:
    """Parse a host-internal element id.

    Raises:
        InvalidArgumentError: Unless raw is a non-negative integer
    """
    if isinstance(raw, bool):
        raise InvalidArgumentError("id", "Invalid element ID", raw)
    if isinstance(raw, int):
        if raw < 0:
            raise InvalidArgumentError("id", "Invalid element ID", raw)
        return raw
    text = str(raw).strip()
    if not NATIVE_ID_PATTERN.match(text):
        raise InvalidArgumentError("id", "Invalid element ID", raw)
    return int(text)


def parse_global_id(raw: str | None) -> GlobalId:
    """Parse a decoded GlobalId.

    Raises:
        InvalidArgumentError: If raw is blank
    """
    global_id = GlobalId.from_string(raw)
    if global_id is None:
        raise InvalidArgumentError("guid", "Invalid GUID", raw)
    return global_id


def parse_export_request(body: Any) -> str:
    """Extract the configuration name from an export request body.

    Raises:
        MissingParameterError: If the body has no configuration
        InvalidArgumentError: If the configuration is not a usable name
    """
    if not isinstance(body, dict) or "configuration" not in body:
        raise MissingParameterError("configuration")
    name = body["configuration"]
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError("configuration", "Invalid IFC configuration name", name)
    return name.strip()


class CommandDispatcher:
    """Maps bridge operations onto a host adapter.

    The adapter may be attached after construction; until then every
    host operation reports the host as unavailable.
    """

    def __init__(
        self,
        executor: HostExecutor,
        settings: Settings,
        adapter: HostAdapter | None = None,
    ) -> None:
        self.executor = executor
        self.settings = settings
        self.readiness = ReadinessFlag()
        self._adapter = adapter

    @property
    def adapter(self) -> HostAdapter | None:
        return self._adapter

    def attach(self, adapter: HostAdapter) -> None:
        """Attach the host adapter once the host is initialised."""
        self._adapter = adapter
        logger.info("Host adapter attached", host=adapter.host_name)

    def _require_adapter(self) -> HostAdapter:
        if self._adapter is None:
            raise ServiceUnavailableError(self.settings.host_display_name)
        return self._adapter

    async def _call(
        self,
        operation: str,
        fn: Callable[..., Any],
        *args: Any,
        timeout: float,
        withdraw_on_timeout: bool = False,
    ) -> Success[Any] | Failure[HostFailure]:
        """Run an adapter call on the host queue and await its completion.

        A timed-out call is left to finish on the host; only the caller
        stops waiting. With ``withdraw_on_timeout`` a call the host has not
        started yet is removed from the queue instead. Only read-only calls
        may be withdrawn.
        """
        try:
            future = self.executor.submit(guarded(operation, fn), *args, name=operation)
        except RuntimeError as e:
            raise ServiceUnavailableError(self.settings.host_display_name) from e

        try:
            return await asyncio.wait_for(asyncio.shield(asyncio.wrap_future(future)), timeout)
        except asyncio.TimeoutError:
            withdrawn = withdraw_on_timeout and future.cancel()
            logger.warning(
                "Host operation timed out",
                operation=operation,
                timeout=timeout,
                withdrawn=withdrawn,
            )
            raise OperationTimeoutError(operation, timeout) from None

    # =========================================================================
    # Status
    # =========================================================================

    async def get_status(self) -> BridgeStatus:
        """Report readiness, probing configuration discovery if needed.

        Returns:
            Current status; ready never reverts once reached
        """
        version = self.settings.app_version
        if self.readiness.is_set:
            return BridgeStatus(True, True, version)

        adapter = self._adapter
        if adapter is None:
            await asyncio.sleep(self.settings.status_unavailable_delay)
            return BridgeStatus(self.readiness.is_set, self.readiness.is_set, version)

        attempts = 1 + self.settings.status_max_retries
        delay = self.settings.status_retry_base_delay
        for attempt in range(attempts):
            if self.readiness.is_set:
                break

            timeout = (
                self.settings.status_timeout if attempt == 0 else self.settings.status_retry_timeout
            )
            try:
                result = await self._call(
                    "configuration probe",
                    adapter.list_configurations,
                    timeout=timeout,
                    withdraw_on_timeout=True,
                )
            except OperationTimeoutError as e:
                reason = e.message
            else:
                names = result.unwrap_or([])
                if names:
                    self.readiness.set()
                    logger.info(
                        "Configurations ready",
                        count=len(names),
                        attempts=attempt + 1,
                    )
                    break
                reason = str(result.error) if result.is_failure() else "no configurations"

            logger.info("Configuration probe failed", attempt=attempt + 1, reason=reason)
            if attempt < attempts - 1:
                await asyncio.sleep(delay)
                delay *= 2

        ready = self.readiness.is_set
        if not ready:
            logger.warning("All configuration probes failed", attempts=attempts)
        return BridgeStatus(ready, ready, version)

    # =========================================================================
    # Selection
    # =========================================================================

    async def select_by_id(self, raw_id: str | int) -> dict[str, Any]:
        native_id = parse_native_id(raw_id)
        adapter = self._require_adapter()
        result = await self._call(
            "select-by-id",
            adapter.select_by_id,
            native_id,
            timeout=self.settings.select_by_id_timeout,
        )
        return self._selection_response(ElementReference.by_native_id(native_id), result)

    async def select_by_global_id(self, raw_guid: str | None) -> dict[str, Any]:
        global_id = parse_global_id(raw_guid)
        adapter = self._require_adapter()
        result = await self._call(
            "select-by-guid",
            adapter.select_by_global_id,
            global_id,
            timeout=self.settings.select_by_guid_timeout,
        )
        return self._selection_response(ElementReference.by_global_id(global_id), result)

    @staticmethod
    def _selection_response(
        reference: ElementReference,
        result: Success[Any] | Failure[HostFailure],
    ) -> dict[str, Any]:
        if result.is_failure():
            if result.error.not_found:
                raise ElementNotFoundError(str(reference))
            raise OperationFailedError("Element selection", result.error.reason)
        return {"success": True, "message": f"Element {reference} selected"}

    # =========================================================================
    # Configurations
    # =========================================================================

    async def list_configurations(self) -> list[str]:
        """List export configuration names; never empty."""
        adapter = self._require_adapter()
        try:
            result = await self._call(
                "list-configurations",
                adapter.list_configurations,
                timeout=self.settings.configurations_timeout,
                withdraw_on_timeout=True,
            )
        except OperationTimeoutError:
            logger.warning("Configuration listing timed out, returning defaults")
            return list(FALLBACK_CONFIGURATIONS)

        if result.is_failure():
            logger.warning("Configuration listing failed, returning defaults", reason=str(result.error))
            return list(FALLBACK_CONFIGURATIONS)

        names = with_fallback(list(result.unwrap_or([]) or []))
        self.readiness.set()
        return names

    # =========================================================================
    # Export
    # =========================================================================

    async def export_ifc(self, body: Any) -> ExportResult:
        """Export the host model with the requested configuration.

        Args:
            body: Decoded JSON request body

        Returns:
            Successful export with file bytes

        Raises:
            ExportFailedError: Carrying the result, file_path always set
        """
        configuration = ExportConfiguration(parse_export_request(body))
        adapter = self._require_adapter()

        export_dir = self.settings.export_path
        export_dir.mkdir(parents=True, exist_ok=True)
        result = ExportResult(file_path=export_dir / export_file_name(adapter.host_name))

        logger.info(
            "IFC export requested",
            configuration=configuration.name,
            path=str(result.file_path),
        )
        try:
            completion = await self._call(
                "IFC export",
                adapter.export_ifc,
                configuration,
                result.file_path,
                timeout=self.settings.export_timeout,
            )
        except OperationTimeoutError as e:
            raise ExportFailedError(result.fail(e.message)) from e

        if completion.is_failure():
            raise ExportFailedError(result.fail(completion.error.reason))

        produced = completion.unwrap()
        if isinstance(produced, Path):
            result.file_path = produced

        try:
            data = await asyncio.to_thread(result.file_path.read_bytes)
        except FileNotFoundError:
            raise ExportFailedError(
                result.fail(f"File was not created at: {result.file_path}")
            ) from None
        except OSError as e:
            raise ExportFailedError(result.fail(f"Could not read export: {e}")) from e

        if not data:
            raise ExportFailedError(result.fail("IFC export produced an empty file"))

        logger.info("IFC export completed", path=str(result.file_path), size=len(data))
        return result.complete(data)

    def discard_export(self, result: ExportResult) -> None:
        """Delete a transferred export file, best effort."""
        try:
            result.file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete export file", path=str(result.file_path), error=str(e))
