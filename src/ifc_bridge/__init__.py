"""IFC Host Bridge.

Loopback HTTP bridge between a browser-based IFC viewer and the CAD host
it is embedded in, for element selection and IFC export.
"""
from __future__ import annotations

__version__ = "1.0.0"

# Re-export main entry point
from ifc_bridge.presentation import main

__all__ = ["main", "__version__"]
