"""Element reference models."""
from __future__ import annotations

from dataclasses import dataclass

from ifc_bridge.domain.exceptions import InvalidArgumentError
from ifc_bridge.domain.value_objects import GlobalId


@dataclass(frozen=True)
class ElementReference:
    """Identifies one host model element.

    Exactly one of ``native_id`` (host-internal, valid for one host
    session) or ``global_id`` (stable across exports) is set.
    """

    native_id: int | None = None
    global_id: GlobalId | None = None

    def __post_init__(self) -> None:
        if (self.native_id is None) == (self.global_id is None):
            raise InvalidArgumentError(
                "element",
                "Exactly one of native id or global id must be given",
                {"native_id": self.native_id, "global_id": str(self.global_id)},
            )
        if self.native_id is not None and self.native_id < 0:
            raise InvalidArgumentError("id", "Invalid element ID", self.native_id)

    @classmethod
    def by_native_id(cls, native_id: int) -> ElementReference:
        return cls(native_id=native_id)

    @classmethod
    def by_global_id(cls, global_id: GlobalId | str) -> ElementReference:
        if isinstance(global_id, str):
            global_id = GlobalId(global_id)
        return cls(global_id=global_id)

    def __str__(self) -> str:
        if self.native_id is not None:
            return str(self.native_id)
        return f"with GUID {self.global_id}"


@dataclass(frozen=True)
class ElementInfo:
    """Summary of an element as reported to the embedded UI."""

    id: int
    global_id: str | None = None
    name: str | None = None
    ifc_class: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "globalId": self.global_id,
            "name": self.name,
            "ifcClass": self.ifc_class,
        }
