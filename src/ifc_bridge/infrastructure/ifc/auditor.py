"""IDS auditing using IfcTester.

Validates an IFC model against an IDS (Information Delivery Specification)
document and summarises the outcome per specification.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import ifcopenshell
from ifctester import ids

from ifc_bridge.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SpecificationOutcome:
    """Result of one IDS specification."""

    name: str
    passed: bool
    applicable_count: int = 0
    failed_count: int = 0
    failed_global_ids: list[str] = field(default_factory=list)

    @property
    def passed_count(self) -> int:
        return self.applicable_count - self.failed_count


@dataclass
class AuditReport:
    """Audit of one model against one IDS document."""

    ids_title: str
    ifc_schema: str
    specifications: list[SpecificationOutcome] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(spec.passed for spec in self.specifications)

    @property
    def failed_specifications(self) -> list[SpecificationOutcome]:
        return [spec for spec in self.specifications if not spec.passed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.ids_title,
            "schema": self.ifc_schema,
            "passed": self.passed,
            "specifications": [
                {
                    "name": spec.name,
                    "passed": spec.passed,
                    "applicable": spec.applicable_count,
                    "failed": spec.failed_count,
                    "failedGlobalIds": spec.failed_global_ids,
                }
                for spec in self.specifications
            ],
        }


def audit_model(model: ifcopenshell.file, specs: ids.Ids) -> AuditReport:
    """Validate a model against parsed IDS specifications.

    Args:
        model: Opened IFC model
        specs: Parsed IDS document

    Returns:
        Per-specification audit report
    """
    specs.validate(model)

    report = AuditReport(
        ids_title=str((specs.info or {}).get("title") or "IDS"),
        ifc_schema=model.schema,
    )
    for spec in specs.specifications:
        failed = list(spec.failed_entities)
        report.specifications.append(
            SpecificationOutcome(
                name=spec.name,
                passed=bool(spec.status),
                applicable_count=len(spec.applicable_entities),
                failed_count=len(failed),
                failed_global_ids=[
                    gid for gid in (getattr(e, "GlobalId", None) for e in failed) if gid
                ],
            )
        )

    logger.info(
        "IDS audit completed",
        specifications=len(report.specifications),
        failed=len(report.failed_specifications),
    )
    return report


def audit_file(ifc_path: str | Path, ids_path: str | Path) -> AuditReport:
    """Open an IFC file and an IDS file and audit one against the other."""
    logger.info("Auditing IFC model", ifc=str(ifc_path), ids=str(ids_path))
    model = ifcopenshell.open(str(ifc_path))
    specs = ids.open(str(ids_path))
    return audit_model(model, specs)
