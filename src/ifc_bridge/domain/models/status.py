"""Bridge readiness models."""
from __future__ import annotations

import threading
from dataclasses import dataclass


class ReadinessFlag:
    """Process-wide "configurations loaded" flag.

    Monotonic: once set it stays set for the lifetime of the process.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._loaded = False

    @property
    def is_set(self) -> bool:
        with self._lock:
            return self._loaded

    def set(self) -> None:
        with self._lock:
            self._loaded = True


@dataclass(frozen=True)
class BridgeStatus:
    """Host readiness snapshot."""

    ready: bool
    configurations_ready: bool
    version: str

    def to_dict(self) -> dict[str, object]:
        return {
            "status": "ok" if self.ready else "initializing",
            "connected": True,
            "configsReady": self.configurations_ready,
            "version": self.version,
        }
