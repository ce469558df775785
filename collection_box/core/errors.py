"""Error kinds shared by every layer of the collection box."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional


class ErrorKind(str, Enum):
    """Category of a failure; the HTTP facade maps these to status codes."""

    INVALID_ARGUMENT = "invalid argument"
    NOT_FOUND = "not found"
    CONFLICT = "conflict"
    INTERNAL = "internal error"


class CollectionBoxError(Exception):
    """A tagged error carrying a kind plus an optional context message.

    ``partial`` holds whatever was persisted before the failure so callers
    can report progress.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str = "",
        *,
        partial: Optional[List[Any]] = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.partial: List[Any] = list(partial or [])
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.message:
            return f"{self.kind.value}: {self.message}"
        return self.kind.value

    def __repr__(self) -> str:
        return f"CollectionBoxError(kind={self.kind.name}, message={self.message!r})"

    def with_message(self, message: str) -> "CollectionBoxError":
        """Return a new error of the same kind with ``message`` appended."""
        combined = f"{self.message}: {message}" if self.message else message
        return CollectionBoxError(self.kind, combined, partial=self.partial)

    def is_kind(self, kind: ErrorKind) -> bool:
        return self.kind is kind

    @classmethod
    def invalid_argument(cls, message: str = "") -> "CollectionBoxError":
        return cls(ErrorKind.INVALID_ARGUMENT, message)

    @classmethod
    def not_found(cls, message: str = "") -> "CollectionBoxError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str = "") -> "CollectionBoxError":
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def internal(cls, message: str = "") -> "CollectionBoxError":
        return cls(ErrorKind.INTERNAL, message)


__all__ = ["ErrorKind", "CollectionBoxError"]
