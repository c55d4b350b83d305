"""Application Services."""
from __future__ import annotations

from ifc_bridge.application.services.dispatcher import (
    CommandDispatcher,
    parse_export_request,
    parse_global_id,
    parse_native_id,
)

__all__ = [
    "CommandDispatcher",
    "parse_export_request",
    "parse_global_id",
    "parse_native_id",
]
