"""Structured logging setup with request-scoped correlation IDs."""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from pythonjsonlogger.json import JsonFormatter

from .config import Settings

APP_NAME = "collectionbox"

_STDLIB_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _add_app_name(_logger: Any, _method: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog and the stdlib root logger.

    ``LOG_FORMAT=json`` hands the structlog event dict to python-json-logger
    as record extras so each line is a single JSON object; ``text`` renders
    key=value pairs behind a plain stdlib prefix.
    """
    settings = settings or Settings()
    level = _STDLIB_LEVELS.get(settings.log_level, logging.INFO)
    use_json = settings.log_format == "json"

    if use_json:
        renderer: Any = structlog.stdlib.render_to_log_kwargs
        formatter: logging.Formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
        )
    else:
        renderer = structlog.processors.KeyValueRenderer(
            key_order=["event", "request_id"], drop_missing=True
        )
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _add_app_name,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    # Request lines come from our own middleware
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    get_logger("collection_box").info(
        "Logger initialized",
        log_level=settings.log_level,
        log_format=settings.log_format,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def bind_request_context(**values: Any) -> None:
    """Attach values to every log line emitted by the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "APP_NAME",
    "setup_logging",
    "get_logger",
    "bind_request_context",
    "clear_request_context",
]
