"""Application configuration.

Uses pydantic-settings for environment variable support.
"""
from __future__ import annotations

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HostKind = Literal["revit", "archicad", "rhino", "ifc"]

# Loopback ports used by the host add-ins
DEFAULT_PORTS: dict[str, int] = {
    "revit": 48881,
    "archicad": 48882,
    "rhino": 48883,
    "ifc": 48880,
}

HOST_DISPLAY_NAMES: dict[str, str] = {
    "revit": "Revit",
    "archicad": "Archicad",
    "rhino": "Rhino",
    "ifc": "IFC host",
}


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables prefixed
    with IFC_BRIDGE_. Example: IFC_BRIDGE_PORT, IFC_BRIDGE_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="IFC_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = Field(default="ifc_bridge", description="Application name")
    app_version: str = Field(default="1.0.0", description="Bridge protocol version")
    debug: bool = Field(default=False, description="Debug mode")

    # =========================================================================
    # Host
    # =========================================================================
    host_kind: HostKind = Field(default="ifc", description="CAD host this bridge serves")
    bind_host: str = Field(default="localhost", description="Listener address")
    port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="Listener port (defaults by host kind)",
    )
    ifc_file: str | None = Field(
        default=None,
        description="IFC model served by the stand-alone file host",
    )
    presets_file: str | None = Field(
        default=None,
        description="JSON file with IFC export configuration presets",
    )
    export_dir: str = Field(
        default=str(Path(tempfile.gettempdir()) / "ifc_bridge"),
        description="Per-application directory for staged IFC exports",
    )

    # =========================================================================
    # Timeouts (seconds)
    # =========================================================================
    status_timeout: float = Field(default=10.0, gt=0, description="First status probe")
    status_retry_timeout: float = Field(default=5.0, gt=0, description="Status probe retries")
    status_max_retries: int = Field(default=3, ge=0, le=10, description="Status probe retries")
    status_retry_base_delay: float = Field(
        default=1.0,
        ge=0,
        description="Initial backoff between status probes (doubles each retry)",
    )
    status_unavailable_delay: float = Field(
        default=0.5,
        ge=0,
        description="Wait before reporting initializing when no host is attached",
    )
    select_by_id_timeout: float = Field(default=5.0, gt=0)
    select_by_guid_timeout: float = Field(default=10.0, gt=0)
    configurations_timeout: float = Field(default=10.0, gt=0)
    export_timeout: float = Field(default=60.0, gt=0)

    # =========================================================================
    # Web application
    # =========================================================================
    web_app_url: str | None = Field(default=None, description="Explicit web app URL override")
    dev_server_url: str = Field(default="http://localhost:5173/")
    web_app_folder: str | None = Field(default=None, description="Bundled web app folder")
    user_config_file: str | None = Field(
        default=None,
        description="File holding a user-chosen web app URL",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_file: str | None = Field(default=None, description="Optional log file path")

    # =========================================================================
    # Validators
    # =========================================================================
    @model_validator(mode="after")
    def default_port_for_host(self) -> Settings:
        """Pick the host's conventional port when none is configured."""
        if self.port is None:
            self.port = DEFAULT_PORTS[self.host_kind]
        return self

    @property
    def base_url(self) -> str:
        """Loopback URL clients use to reach this bridge."""
        return f"http://{self.bind_host}:{self.port}"

    @property
    def status_probe_budget(self) -> float:
        """Worst-case duration of a status call while the host is loading.

        First probe, every retry probe and the backoff sleeps between them.
        """
        retries = self.status_max_retries
        backoff = sum(self.status_retry_base_delay * 2**i for i in range(retries))
        return self.status_timeout + retries * self.status_retry_timeout + backoff

    @property
    def host_display_name(self) -> str:
        return HOST_DISPLAY_NAMES[self.host_kind]

    @property
    def export_path(self) -> Path:
        """Export directory as a Path."""
        return Path(self.export_dir)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
