"""Domain Layer.

Bridge data model, error taxonomy and the host adapter contract.
This layer has no transport dependencies (no FastAPI, no httpx).
"""
from __future__ import annotations

from ifc_bridge.domain.exceptions import (
    BridgeError,
    ElementNotFoundError,
    ExportFailedError,
    InvalidArgumentError,
    MissingParameterError,
    OperationFailedError,
    OperationTimeoutError,
    ServiceUnavailableError,
)
from ifc_bridge.domain.models import (
    FALLBACK_CONFIGURATIONS,
    BridgeStatus,
    ElementInfo,
    ElementReference,
    ExportConfiguration,
    ExportResult,
    IfcSchema,
    ReadinessFlag,
)
from ifc_bridge.domain.value_objects import GlobalId

__all__ = [
    # Exceptions
    "BridgeError",
    "InvalidArgumentError",
    "MissingParameterError",
    "ServiceUnavailableError",
    "OperationTimeoutError",
    "OperationFailedError",
    "ElementNotFoundError",
    "ExportFailedError",
    # Models
    "ElementReference",
    "ElementInfo",
    "ExportConfiguration",
    "ExportResult",
    "IfcSchema",
    "FALLBACK_CONFIGURATIONS",
    "BridgeStatus",
    "ReadinessFlag",
    # Value Objects
    "GlobalId",
]
