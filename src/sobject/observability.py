"""Structured logging setup.

Library modules only call structlog.get_logger(); applications call
configure_structlog() once at startup to pick the output format and level.
"""

from __future__ import annotations

import logging

import structlog

from src.sobject.config import Environment, Settings, get_settings


def configure_structlog(settings: Settings | None = None) -> None:
    """Render JSON in production and console output elsewhere, filtered by LOG_LEVEL."""
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.ENVIRONMENT == Environment.production:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
