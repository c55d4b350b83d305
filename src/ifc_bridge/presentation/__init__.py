"""Presentation Layer.

HTTP and in-process transports for the host bridge.
"""
from ifc_bridge.presentation.script_bridge import ScriptBridge
from ifc_bridge.presentation.server import main

__all__ = ["ScriptBridge", "main"]
