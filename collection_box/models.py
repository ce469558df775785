"""Core data models for the collection box."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class URLOriginPair:
    """A URL found in user text together with its resolved origin label."""

    url: str
    origin: str


@dataclass
class Collection:
    """A persisted collection record."""

    id: str
    url: str
    origin: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "origin": self.origin,
            "created_at": self.created_at.isoformat(),
        }


__all__ = ["URLOriginPair", "Collection", "utcnow"]
