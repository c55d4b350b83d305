"""IFC tooling backed by IfcOpenShell and IfcTester."""
from __future__ import annotations

from ifc_bridge.infrastructure.ifc.auditor import AuditReport, SpecificationOutcome, audit_file, audit_model

__all__ = ["AuditReport", "SpecificationOutcome", "audit_file", "audit_model"]
