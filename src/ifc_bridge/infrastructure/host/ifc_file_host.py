"""Stand-alone IFC file host.

Host adapter backed by an IfcOpenShell model instead of a CAD application.
It serves a single IFC file, keeps a selection set and exports the model
with the requested configuration. Useful on machines without a CAD host
and as the reference implementation of the adapter contract.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import ifcopenshell
import ifcopenshell.util.schema

from ifc_bridge.domain.adapters import HostFailure, HostResult
from ifc_bridge.domain.models import (
    FALLBACK_CONFIGURATIONS,
    ElementInfo,
    ExportConfiguration,
    with_fallback,
)
from ifc_bridge.domain.value_objects import GlobalId
from ifc_bridge.infrastructure.host.capabilities import CapabilityLookup, Strategy
from ifc_bridge.shared.logging import get_logger
from ifc_bridge.shared.result import err, ok

logger = get_logger(__name__)

# Presets offered per model schema when no presets file is configured
SCHEMA_PRESETS: dict[str, list[str]] = {
    "IFC2X3": ["Default", "IFC2x3 Coordination View 2.0", "IFC2x3 Coordination View"],
    "IFC4": ["Default", "IFC4 Reference View", "IFC4 Design Transfer View"],
}


class IfcFileHostAdapter:
    """Host adapter over an in-memory IFC model.

    All methods are expected to run on the HostExecutor's consumer.
    """

    def __init__(
        self,
        model: ifcopenshell.file,
        title: str | None = None,
        presets_file: str | Path | None = None,
    ) -> None:
        self.model = model
        self.title = title or self._project_name() or "Model"
        self.presets_file = Path(presets_file) if presets_file else None
        self._selection: list[int] = []
        self._configurations: dict[str, ExportConfiguration] = {}

    @classmethod
    def from_path(cls, path: str | Path, presets_file: str | Path | None = None) -> IfcFileHostAdapter:
        """Open an IFC file and wrap it.

        Args:
            path: IFC file path
            presets_file: Optional JSON presets file

        Returns:
            Adapter serving the model
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"IFC file not found: {path}")
        logger.info("Opening IFC model", path=str(path))
        model = ifcopenshell.open(str(path))
        return cls(model, title=path.stem, presets_file=presets_file)

    @property
    def host_name(self) -> str:
        return "IFC"

    @property
    def schema(self) -> str:
        return self.model.schema.upper()

    # =========================================================================
    # Selection
    # =========================================================================

    def select_by_id(self, native_id: int) -> HostResult[ElementInfo]:
        try:
            entity = self.model.by_id(native_id)
        except RuntimeError:
            return err(HostFailure(f"Element {native_id} not found", not_found=True))
        if not entity.is_a("IfcRoot"):
            return err(HostFailure(f"Entity #{native_id} is not a model element", not_found=True))
        return ok(self._select(entity))

    def select_by_global_id(self, global_id: GlobalId) -> HostResult[ElementInfo]:
        entity = None
        if global_id.is_ifc_format:
            try:
                entity = self.model.by_guid(global_id.value)
            except RuntimeError:
                entity = None
        if entity is None:
            entity = next(
                (e for e in self.model.by_type("IfcRoot") if global_id.matches(e.GlobalId)),
                None,
            )
        if entity is None:
            return err(HostFailure(f"Element with GUID {global_id} not found", not_found=True))
        return ok(self._select(entity))

    def get_selected_elements(self) -> HostResult[list[ElementInfo]]:
        elements = []
        for native_id in self._selection:
            try:
                elements.append(self._info(self.model.by_id(native_id)))
            except RuntimeError:
                continue
        return ok(elements)

    def _select(self, entity: ifcopenshell.entity_instance) -> ElementInfo:
        self._selection = [entity.id()]
        info = self._info(entity)
        logger.info("Element selected", element_id=info.id, global_id=info.global_id)
        return info

    @staticmethod
    def _info(entity: ifcopenshell.entity_instance) -> ElementInfo:
        return ElementInfo(
            id=entity.id(),
            global_id=getattr(entity, "GlobalId", None),
            name=getattr(entity, "Name", None),
            ifc_class=entity.is_a(),
        )

    # =========================================================================
    # Export configurations
    # =========================================================================

    def list_configurations(self) -> HostResult[list[str]]:
        lookup: CapabilityLookup[list[ExportConfiguration]] = CapabilityLookup(
            "ifc-export-configurations",
            [
                Strategy("presets-file", self._presets_from_file),
                Strategy("model-schema", self._presets_from_schema),
            ],
            default=[ExportConfiguration(name) for name in FALLBACK_CONFIGURATIONS],
        )
        resolution = lookup.resolve()
        self._configurations = {c.name.casefold(): c for c in resolution.value}
        names = with_fallback([c.name for c in resolution.value])
        logger.debug("IFC export configurations listed", source=resolution.source, count=len(names))
        return ok(names)

    def configuration(self, name: str) -> ExportConfiguration:
        """Look up a listed configuration, or build one from its name."""
        return self._configurations.get(name.strip().casefold()) or ExportConfiguration(name.strip())

    def _presets_from_file(self) -> list[ExportConfiguration] | None:
        if self.presets_file is None:
            return None
        data: Any = json.loads(self.presets_file.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("configurations", [])
        presets = []
        for entry in data:
            if isinstance(entry, str):
                presets.append(ExportConfiguration(entry))
            elif isinstance(entry, dict) and entry.get("name"):
                settings = {k: v for k, v in entry.items() if k != "name"}
                presets.append(ExportConfiguration(entry["name"], settings))
        return presets

    def _presets_from_schema(self) -> list[ExportConfiguration] | None:
        names = SCHEMA_PRESETS.get(self.schema)
        if names is None:
            return None
        return [ExportConfiguration(name) for name in names]

    # =========================================================================
    # Export
    # =========================================================================

    def export_ifc(
        self, configuration: ExportConfiguration, output_path: Path,
    ) -> HostResult[Path]:
        if configuration.name.casefold() in self._configurations:
            configuration = self._configurations[configuration.name.casefold()]
        target = configuration.schema.value if configuration.schema else self.schema

        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(
            "Starting IFC export",
            configuration=configuration.name,
            schema=target,
            path=str(output_path),
        )

        if target == self.schema:
            self.model.write(str(output_path))
        else:
            self._migrate(target).write(str(output_path))

        if not output_path.exists():
            return err(HostFailure(f"File was not created at: {output_path}"))
        return ok(output_path)

    def _migrate(self, schema: str) -> ifcopenshell.file:
        migrator = ifcopenshell.util.schema.Migrator()
        target = ifcopenshell.file(schema=schema)
        for entity in self.model:
            migrator.migrate(entity, target)
        logger.info("Model migrated for export", source=self.schema, target=schema)
        return target

    def _project_name(self) -> str | None:
        projects = self.model.by_type("IfcProject")
        if projects and projects[0].Name:
            return str(projects[0].Name)
        return None
