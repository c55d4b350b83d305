"""Web application discovery.

Resolves which URL the embedded browser should load and where the bridge
can be reached.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ifc_bridge.shared.config import Settings
from ifc_bridge.shared.logging import get_logger

logger = get_logger(__name__)

# Virtual host the browser control maps onto the bundled web folder
VIRTUAL_HOST_URL = "http://app.localhost/index.html"


@dataclass(frozen=True)
class WebAppLocation:
    """Resolved web app URL."""

    url: str
    uses_dev_server: bool
    source: str


def user_config_path(settings: Settings) -> Path:
    """Per-user file holding an overriding web app URL."""
    if settings.user_config_file:
        return Path(settings.user_config_file)
    base = os.environ.get("LOCALAPPDATA") or os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / settings.app_name / "webapp.config"


def find_web_app_folder(settings: Settings) -> Path | None:
    """Locate the bundled web app, if installed."""
    candidates = []
    if settings.web_app_folder:
        candidates.append(Path(settings.web_app_folder))
    candidates.append(Path(__file__).resolve().parent.parent / "web")
    for folder in candidates:
        if folder.is_dir():
            return folder
    return None


def resolve_web_app_url(settings: Settings) -> WebAppLocation:
    """Pick the web app URL.

    Order: explicit setting, user config file, bundled folder served
    through the virtual host, then the dev server.
    """
    if settings.web_app_url:
        return WebAppLocation(settings.web_app_url, False, "settings")

    config_path = user_config_path(settings)
    if config_path.is_file():
        try:
            url = config_path.read_text(encoding="utf-8").strip()
        except OSError as e:
            logger.warning("Unreadable web app config", path=str(config_path), error=str(e))
        else:
            if url:
                return WebAppLocation(url, False, "user-config")

    if find_web_app_folder(settings) is not None:
        return WebAppLocation(VIRTUAL_HOST_URL, False, "bundled")

    return WebAppLocation(settings.dev_server_url, True, "dev-server")
