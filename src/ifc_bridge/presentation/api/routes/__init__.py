"""API Routes."""
from ifc_bridge.presentation.api.routes import bridge

__all__ = ["bridge"]
