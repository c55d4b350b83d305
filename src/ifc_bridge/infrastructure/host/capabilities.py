"""Capability lookup with graceful degradation.

Host APIs differ across versions and installed add-ins. A capability is
resolved by trying an ordered list of provider strategies; the first one
that yields a usable value wins, otherwise a safe default is returned.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from ifc_bridge.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """Named provider for a capability."""

    name: str
    provide: Callable[[], T | None]


@dataclass(frozen=True)
class Resolution(Generic[T]):
    """Value of a capability and the strategy that produced it."""

    value: T
    source: str
    degraded: bool = False


class CapabilityLookup(Generic[T]):
    """Resolve a capability from ordered strategies.

    Example:
        >>> lookup = CapabilityLookup("configs", [Strategy("empty", lambda: [])], default=["Default"])
        >>> lookup.resolve().value
        ['Default']
    """

    def __init__(
        self,
        capability: str,
        strategies: list[Strategy[T]],
        default: T,
        accept: Callable[[T], bool] | None = None,
    ) -> None:
        self.capability = capability
        self.strategies = list(strategies)
        self.default = default
        self.accept = accept or bool

    def resolve(self) -> Resolution[T]:
        """Try each strategy in order.

        Returns:
            First accepted value, or the default marked as degraded
        """
        for strategy in self.strategies:
            try:
                value = strategy.provide()
            except Exception as e:
                logger.debug(
                    "Capability strategy failed",
                    capability=self.capability,
                    strategy=strategy.name,
                    error=str(e),
                )
                continue
            if value is not None and self.accept(value):
                logger.debug(
                    "Capability resolved",
                    capability=self.capability,
                    strategy=strategy.name,
                )
                return Resolution(value, strategy.name)

        logger.info("Capability degraded to default", capability=self.capability)
        return Resolution(self.default, "default", degraded=True)
