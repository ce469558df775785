"""Core building blocks for the collection box service."""

from .config import Settings
from .errors import CollectionBoxError, ErrorKind
from .logging import get_logger, setup_logging

__all__ = [
    "Settings",
    "CollectionBoxError",
    "ErrorKind",
    "get_logger",
    "setup_logging",
]
