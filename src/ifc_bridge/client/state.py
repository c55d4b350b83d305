"""Client-side connection state and notifications."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable
from urllib.parse import parse_qs, urlsplit

from ifc_bridge.shared.config import DEFAULT_PORTS, HOST_DISPLAY_NAMES, HostKind
from ifc_bridge.shared.logging import get_logger

logger = get_logger(__name__)

LOCAL_HOSTNAMES = frozenset({"localhost", "127.0.0.1", "0.0.0.0"})


@dataclass
class ConnectionState:
    """Connection record observed by the UI shell.

    Starts as "no host detected" and returns to the disconnected state on
    ``reset()``.
    """

    host: HostKind = "revit"
    enabled: bool = False
    api_url: str | None = None
    connected: bool = False
    loading: bool = False
    auditing: bool = False

    @property
    def host_name(self) -> str:
        return HOST_DISPLAY_NAMES[self.host]

    @classmethod
    def for_page(cls, page_url: str, host: HostKind = "revit") -> ConnectionState:
        """Derive the bridge URL from the page hosting the UI.

        An ``?api=`` query parameter wins. Otherwise a page served from
        loopback talks to the host's default port; remote pages cannot
        guess the host machine's address and stay disabled.

        Args:
            page_url: URL of the page hosting the UI
            host: CAD host to connect to

        Returns:
            Initial connection state
        """
        parts = urlsplit(page_url)
        api_url = parse_qs(parts.query).get("api", [None])[0]
        if api_url:
            return cls(host=host, enabled=True, api_url=api_url.rstrip("/"))
        if parts.hostname in LOCAL_HOSTNAMES:
            return cls(host=host, enabled=True, api_url=f"http://localhost:{DEFAULT_PORTS[host]}")

        logger.warning(
            "Host integration requires an api parameter on remote pages",
            host=host,
            page=page_url,
        )
        return cls(host=host)

    def reset(self) -> None:
        self.connected = False
        self.loading = False
        self.auditing = False


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


@dataclass
class Notifier:
    """Collects user-facing messages and forwards them to an optional sink."""

    sink: Callable[[Notification], None] | None = None
    history: list[Notification] = field(default_factory=list)

    def notify(self, level: NotificationLevel, message: str) -> None:
        notification = Notification(level, message)
        self.history.append(notification)
        if level is NotificationLevel.ERROR:
            logger.warning("User notified", message=message)
        else:
            logger.info("User notified", message=message)
        if self.sink is not None:
            self.sink(notification)

    def success(self, message: str) -> None:
        self.notify(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> None:
        self.notify(NotificationLevel.ERROR, message)

    def info(self, message: str) -> None:
        self.notify(NotificationLevel.INFO, message)

    @property
    def last(self) -> Notification | None:
        return self.history[-1] if self.history else None
