"""Domain Models."""
from __future__ import annotations

from ifc_bridge.domain.models.element import ElementInfo, ElementReference
from ifc_bridge.domain.models.export import (
    FALLBACK_CONFIGURATIONS,
    ExportConfiguration,
    ExportResult,
    IfcSchema,
    export_file_name,
    with_fallback,
)
from ifc_bridge.domain.models.status import BridgeStatus, ReadinessFlag

__all__ = [
    "ElementReference",
    "ElementInfo",
    "ExportConfiguration",
    "ExportResult",
    "IfcSchema",
    "FALLBACK_CONFIGURATIONS",
    "export_file_name",
    "with_fallback",
    "BridgeStatus",
    "ReadinessFlag",
]
