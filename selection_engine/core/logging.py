"""Structured logging for the engine.

Modules log snake_case events with keyword context, e.g.
``logger.debug("flatten_completed", domain="soreness", shape="hierarchical")``.
Nothing is configured on import; a host process calls ``configure_logging``
once, and library users that never do get structlog's defaults.
"""
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from selection_engine.config.settings import Settings, get_settings


def _engine_name(app_name: str):
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("engine", app_name)
        return event_dict

    return processor


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structured logging with structlog."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _engine_name(settings.app_name),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind context to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
