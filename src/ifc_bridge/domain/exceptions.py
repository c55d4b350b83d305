"""Domain layer exceptions.

All bridge errors inherit from BridgeError and carry the HTTP status the
transport reports them with.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ifc_bridge.domain.models import ExportResult


class BridgeError(Exception):
    """Base exception for bridge errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvalidArgumentError(BridgeError):
    status_code = 400

    def __init__(self, field: str, message: str, value: Any = None) -> None:
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class MissingParameterError(BridgeError):
    status_code = 400

    def __init__(self, parameter: str) -> None:
        super().__init__(f"Missing '{parameter}' parameter", {"parameter": parameter})
        self.parameter = parameter


class ServiceUnavailableError(BridgeError):
    status_code = 503

    def __init__(self, host_name: str = "Host") -> None:
        super().__init__(f"{host_name} application not available")
        self.host_name = host_name


class OperationTimeoutError(BridgeError):
    """No completion signal within the operation budget.

    The host call may still complete after this is raised.
    """

    def __init__(self, operation: str, timeout: float, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"{operation} timed out after {timeout:g}s", details)
        self.operation = operation
        self.timeout = timeout


class OperationFailedError(BridgeError):
    def __init__(self, operation: str, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"{operation} failed: {reason}", details)
        self.operation = operation
        self.reason = reason


class ElementNotFoundError(BridgeError):
    def __init__(self, reference: str) -> None:
        super().__init__(f"Element {reference} not found or selection failed")
        self.reference = reference


class ExportFailedError(OperationFailedError):
    def __init__(self, result: ExportResult) -> None:
        super().__init__(
            "IFC export",
            result.reason or "Unknown error",
            {"file_path": str(result.file_path)},
        )
        self.result = result
