"""IFC export models."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import uuid4

# Substituted whenever a host yields no configurations
FALLBACK_CONFIGURATIONS: tuple[str, ...] = ("Default", "IFC2x3", "IFC4")


class IfcSchema(str, Enum):
    """IFC schema an export configuration targets."""

    IFC2X3 = "IFC2X3"
    IFC4 = "IFC4"


@dataclass(frozen=True)
class ExportConfiguration:
    """Named IFC export preset.

    ``settings`` is host-specific and opaque to the bridge.
    """

    name: str
    settings: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Export configuration name cannot be empty")

    @property
    def schema(self) -> IfcSchema | None:
        """Schema implied by the preset, None for the host default."""
        explicit = self.settings.get("schema")
        if explicit:
            return IfcSchema(str(explicit).upper())
        lowered = self.name.lower()
        if "ifc2x3" in lowered:
            return IfcSchema.IFC2X3
        if "ifc4" in lowered:
            return IfcSchema.IFC4
        return None

    def matches(self, name: str) -> bool:
        return self.name.casefold() == name.strip().casefold()


def with_fallback(names: list[str]) -> list[str]:
    """Drop blank names and substitute the fallback set for an empty list."""
    cleaned: list[str] = []
    for name in names:
        if name and name.strip() and name.strip() not in cleaned:
            cleaned.append(name.strip())
    return cleaned or list(FALLBACK_CONFIGURATIONS)


def export_file_name(label: str, now: datetime | None = None) -> str:
    """Build ``Export_<label>_<yyyyMMdd_HHmmss>_<suffix>.ifc``."""
    now = now or datetime.now()
    safe_label = "".join(c if c.isalnum() or c in "-_" else "_" for c in label) or "Model"
    return f"Export_{safe_label}_{now:%Y%m%d_%H%M%S}_{uuid4().hex[:8]}.ifc"


@dataclass
class ExportResult:
    """Outcome of an export attempt.

    ``file_path`` is set before the export is handed to the host so it is
    available for diagnostics even when the host never answers.
    """

    file_path: Path
    succeeded: bool = False
    file_bytes: bytes | None = None
    reason: str | None = None

    @property
    def file_name(self) -> str:
        return self.file_path.name

    def fail(self, reason: str) -> ExportResult:
        self.succeeded = False
        self.file_bytes = None
        self.reason = reason
        return self

    def complete(self, data: bytes) -> ExportResult:
        self.succeeded = True
        self.file_bytes = data
        self.reason = None
        return self
