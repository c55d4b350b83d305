"""Shared module.

Cross-cutting concerns: configuration, logging, result pattern.
"""
from ifc_bridge.shared.config import DEFAULT_PORTS, Settings, get_settings, settings

__all__ = [
    "DEFAULT_PORTS",
    "Settings",
    "get_settings",
    "settings",
]
