"""Structured logging configuration.

Uses structlog on top of stdlib logging so records from uvicorn, httpx and
ifcopenshell are rendered the same way as the bridge's own events.
"""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Libraries that only log at WARNING and above unless debugging the bridge
NOISY_LOGGERS = ("asyncio", "httpx", "httpcore", "uvicorn.access")

_configured = False
_handlers: list[logging.Handler] = []


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging(
    level: str = "INFO",
    log_format: str = "console",
    log_file: str | None = None,
) -> None:
    """Configure structured logging.

    May be called again, e.g. once the CLI has parsed its settings; handlers
    installed by an earlier call are replaced.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "console")
        log_file: Optional log file path
    """
    global _configured

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_renderer(log_format),
        foreign_pre_chain=pre_chain,
    )

    root_logger = logging.getLogger()
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    _handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        _handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in _handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    numeric_level = getattr(logging, level.upper())
    root_logger.setLevel(numeric_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring from settings on first use."""
    if not _configured:
        from ifc_bridge.shared.config import settings

        configure_logging(
            level=settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file,
        )

    return structlog.get_logger(name)
