"""Host Bridge Server.

Runs the loopback HTTP listener for a host process.
"""
from __future__ import annotations

import argparse
from typing import get_args

import uvicorn
from fastapi import FastAPI

from ifc_bridge.application.services import CommandDispatcher
from ifc_bridge.domain.adapters import HostAdapter
from ifc_bridge.infrastructure.host import HostExecutor, IfcFileHostAdapter
from ifc_bridge.presentation.api import create_app
from ifc_bridge.shared.config import HostKind, Settings, get_settings
from ifc_bridge.shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_dispatcher(settings: Settings, adapter: HostAdapter | None = None) -> CommandDispatcher:
    """Create the dispatcher and its host executor.

    Args:
        settings: Bridge settings
        adapter: Host adapter, or None to attach one later

    Returns:
        Dispatcher with an executor that is not started yet
    """
    executor = HostExecutor(name=f"{settings.host_kind}-main")
    dispatcher = CommandDispatcher(executor, settings)
    if adapter is not None:
        dispatcher.attach(adapter)
    return dispatcher


def build_app(settings: Settings) -> FastAPI:
    """Build the bridge app, attaching the IFC file host if configured."""
    adapter = None
    if settings.ifc_file:
        adapter = IfcFileHostAdapter.from_path(settings.ifc_file, settings.presets_file)
    elif settings.host_kind == "ifc":
        logger.warning("No IFC file configured, host operations will be unavailable")
    return create_app(create_dispatcher(settings, adapter))


def run_server(settings: Settings) -> None:
    """Serve the bridge until interrupted."""
    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
    )
    app = build_app(settings)
    logger.info(
        "Starting host bridge",
        url=settings.base_url,
        host=settings.host_kind,
        version=settings.app_version,
    )
    uvicorn.run(
        app,
        host=settings.bind_host,
        port=settings.port,
        log_config=None,
        access_log=settings.debug,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the IFC host bridge")
    parser.add_argument("--ifc-file", help="IFC model to serve")
    parser.add_argument("--presets-file", help="JSON file with export configuration presets")
    parser.add_argument("--host", dest="bind_host", help="Listener address")
    parser.add_argument("--port", type=int, help="Listener port")
    parser.add_argument("--host-kind", choices=get_args(HostKind), help="CAD host served")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the host bridge."""
    args = parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if v is not None}
    settings = Settings(**overrides) if overrides else get_settings()
    run_server(settings)


if __name__ == "__main__":
    main()
