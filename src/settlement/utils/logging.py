"""Logging configuration for the settlement context.

stdlib logging carries the handlers; structlog renders the events. Call
``configure_logging()`` once at process start (the FastAPI app does this).
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

from settlement.config import get_settings

CONTEXT_NAME = "settlement"

_LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def get_log_level() -> str:
    """LOG_LEVEL wins; otherwise the level follows PROTEAN_ENV."""
    return os.getenv("LOG_LEVEL", _LEVELS_BY_ENV.get(get_settings().environment, "INFO"))


def setup_stdlib_logging(log_dir: str | Path = "logs") -> None:
    """Configure standard library logging."""
    log_level = get_log_level()

    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{CONTEXT_NAME}.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)

    error_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{CONTEXT_NAME}_error.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(error_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("protean").setLevel(logging.WARNING)


def _add_context_name(logger, method_name, event_dict):
    event_dict.setdefault("context", CONTEXT_NAME)
    return event_dict


def setup_structlog() -> None:
    """Configure structlog for structured logging."""
    env = get_settings().environment

    processors = [
        structlog.stdlib.filter_by_level,
        _add_context_name,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.contextvars.merge_contextvars,
    ]

    if env in ["production", "staging"]:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    show_locals=False,
                    max_frames=3,
                ),
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | Path = "logs") -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging(log_dir)
    setup_structlog()


def bind_order_context(order_id: str, **kwargs: Any) -> None:
    """Attach the order being processed to every log event on this context."""
    structlog.contextvars.bind_contextvars(order_id=order_id, **kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
