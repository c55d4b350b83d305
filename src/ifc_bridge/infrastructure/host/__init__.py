"""Host integration.

Main-thread hand-off, capability discovery and host adapters.
"""
from __future__ import annotations

from ifc_bridge.infrastructure.host.capabilities import CapabilityLookup, Resolution, Strategy
from ifc_bridge.infrastructure.host.executor import HostExecutor
from ifc_bridge.infrastructure.host.ifc_file_host import IfcFileHostAdapter

__all__ = [
    "CapabilityLookup",
    "Resolution",
    "Strategy",
    "HostExecutor",
    "IfcFileHostAdapter",
]
