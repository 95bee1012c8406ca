"""
Structured logging configuration using structlog.

JSON lines in staging/production, coloured console output in development.
Ledger events are logged with snake_case event names and key/value context
(item_id, movement_type, usage_qty, ...).
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

import structlog
from structlog.types import Processor

from src.config.settings import get_settings

# Rounded in log output so float noise from unit conversion stays out of the logs
_QUANTITY_FIELDS = frozenset(
    {
        "usage_qty",
        "packaging_qty",
        "quantity",
        "hours",
        "stock_usage",
        "reserved_usage",
        "unit_cost_usage",
        "inventory_value",
        "book_value",
        "generated",
    }
)


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add application context to log events."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def render_ledger_values(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Log enums (movement type, status) by value and round quantities."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
        elif key in _QUANTITY_FIELDS and isinstance(value, float):
            event_dict[key] = round(value, 6)
    return event_dict


@contextmanager
def log_context(**context: Any) -> Iterator[None]:
    """
    Bind context (item_id, movement_type, reservation_id) to every log line
    emitted inside the block, including store and connection logs.
    """
    with structlog.contextvars.bound_contextvars(**context):
        yield


def configure_logging(json_output: bool | None = None) -> None:
    """Configure structlog for the application.

    Args:
        json_output: Force JSON (True) or console (False) rendering.
            Defaults to console in development, JSON elsewhere.
    """
    settings = get_settings()
    if json_output is None:
        json_output = settings.environment != "development"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_app_context,
        render_ledger_values,
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_level = getattr(logging, settings.log_level)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # aiosqlite logs every statement at DEBUG
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
