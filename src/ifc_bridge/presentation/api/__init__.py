"""HTTP transport."""
from ifc_bridge.presentation.api.app import create_app

__all__ = ["create_app"]
