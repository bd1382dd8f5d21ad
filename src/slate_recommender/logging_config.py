"""
Structured logging configuration using structlog.

Every event carries the service name; request handlers and pipeline runs add
``request_id`` / ``run_id`` through context variables.
"""

import logging
from typing import Optional, TextIO

import structlog

from .config import settings


SERVICE_NAME = "slate-recommender"


def add_service_name(logger, method_name: str, event_dict: dict) -> dict:
    """Processor stamping the service name on every event."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog.

    Args:
        level: Minimum level name (default: settings.log_level)
        json_output: JSON lines instead of console output (default: settings.log_json)
        stream: Output stream (default: stdout). The CLI logs to stderr so its
            JSON result on stdout stays parseable.
    """
    level = (level or settings.log_level).upper()
    json_output = settings.log_json if json_output is None else json_output

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service_name,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            (
                structlog.processors.JSONRenderer()
                if json_output
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )
