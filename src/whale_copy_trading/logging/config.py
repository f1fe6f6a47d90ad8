# -*- coding: utf-8 -*-
"""Logging configuration for structlog + Logfire."""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

import logfire
import structlog
from structlog.types import EventDict, Processor

from whale_copy_trading.config import LoggingSettings, get_settings

LOG_LEVEL_TO_LOGFIRE: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "fatal",
}


def _add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Attach logger name, app name, version and environment to every log event."""
    stdlib_logger = getattr(logger, "_logger", None)
    event_dict["logger"] = (
        getattr(stdlib_logger, "name", None) or getattr(logger, "name", "") or ""
    )
    app_settings = get_settings().app
    event_dict["app_name"] = app_settings.app_name
    if app_settings.service_version:
        event_dict["service_version"] = app_settings.service_version
    event_dict["environment"] = app_settings.environment
    return event_dict


def _build_handlers(cfg: LoggingSettings) -> list[logging.Handler]:
    """Console and/or rotating file handlers, each with its own level."""
    handlers: list[logging.Handler] = []
    if cfg.log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, cfg.console_level, logging.INFO))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(console_handler)

    if cfg.log_to_file:
        path = Path(cfg.log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            path,
            when=cfg.log_file_when,
            interval=cfg.log_file_interval,
            backupCount=cfg.log_file_backup_count,
            encoding="utf-8",
            utc=cfg.log_file_utc,
        )
        file_handler.setLevel(getattr(logging, cfg.file_level, logging.INFO))
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(file_handler)
    return handlers


def configure_logging() -> None:
    """Configure stdlib handlers, optional Logfire, and the structlog processor chain."""
    settings = get_settings()
    cfg = settings.logging

    handlers = _build_handlers(cfg)
    if handlers:
        logging.basicConfig(level=min(h.level for h in handlers), handlers=handlers)

    if cfg.logfire_enabled:
        logfire.configure(
            token=cfg.logfire_token,
            service_name=settings.app.service_name or settings.app.app_name,
            service_version=settings.app.service_version,
            min_level=LOG_LEVEL_TO_LOGFIRE.get(cfg.logfire_level, "info"),  # type: ignore[arg-type]
            environment=settings.app.environment,
        )

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service_context,
    ]
    if cfg.logfire_enabled:
        processors.append(logfire.StructlogProcessor())  # type: ignore[arg-type]

    # File output is always JSON; console follows json_format unless a file is also written.
    if handlers:
        use_json = cfg.log_to_file or cfg.json_format
        renderer: Any = (
            structlog.processors.JSONRenderer()
            if use_json
            else structlog.dev.ConsoleRenderer()
        )
        processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
