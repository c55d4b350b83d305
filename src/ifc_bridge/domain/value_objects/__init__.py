"""Domain Value Objects.

Immutable objects that represent domain concepts without identity.
"""
from __future__ import annotations

from ifc_bridge.domain.value_objects.global_id import GlobalId

__all__ = ["GlobalId"]
