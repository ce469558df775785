"""Abstract persistence interface for collections."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from ..models import Collection


class CollectionStore(ABC):
    """Persistence for collection records.

    Implementations raise ``CollectionBoxError`` with kind ``CONFLICT`` when
    a URL already exists and ``INTERNAL`` for every storage failure.
    """

    async def open(self) -> None:
        """Acquire resources and make sure the schema exists."""

    async def close(self) -> None:
        """Release resources."""

    @abstractmethod
    async def create(self, collection: Collection) -> None:
        """Insert a new record."""

    @abstractmethod
    async def upsert_created_at(self, url: str, created_at: datetime) -> bool:
        """Refresh ``created_at`` for ``url``; returns False if nothing changed."""

    @abstractmethod
    async def get_by_url(self, url: str) -> Optional[Collection]:
        """Return the record stored for ``url``."""

    @abstractmethod
    async def get_by_origin(self, origin: str) -> List[Collection]:
        """Return every record with the given origin label."""

    @abstractmethod
    async def get_by_time_range(
        self, start: datetime, end: datetime, origin: str = ""
    ) -> List[Collection]:
        """Return records created in ``[start, end]``, optionally for one origin."""

    @abstractmethod
    async def get_all_grouped_by_origin(self) -> Dict[str, List[Collection]]:
        """Return every record grouped by origin label."""
