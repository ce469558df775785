"""Collection service: validation and orchestration over extractor and store."""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .core.errors import CollectionBoxError, ErrorKind
from .core.logging import get_logger
from .extractor import URLExtractor
from .metrics import observe_collection_created
from .models import Collection, utcnow
from .storage import CollectionStore

logger = get_logger(__name__)

MAX_TIME_RANGE = timedelta(days=15)
DEFAULT_TIME_RANGE = timedelta(hours=24)


class CollectionService:
    """Turns pasted text into stored collections and answers read queries."""

    def __init__(
        self,
        store: CollectionStore,
        extractor: URLExtractor,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.extractor = extractor
        self._clock = clock
        # create + refresh for one URL must not interleave with another writer
        self._write_lock = asyncio.Lock()

    async def create_from_text(self, text: str) -> List[Collection]:
        """Extract every supported URL from ``text`` and persist it.

        A URL that is already stored gets its ``created_at`` refreshed and the
        existing record is returned in its place. On an internal failure the
        records persisted so far travel on the raised error's ``partial``.
        """
        if not text or not text.strip():
            raise CollectionBoxError.invalid_argument("url cannot be empty")

        pairs = self.extractor.extract_all(text)

        created: List[Collection] = []
        for pair in pairs:
            try:
                async with self._write_lock:
                    collection = await self._create_or_refresh(pair.url, pair.origin)
            except CollectionBoxError as exc:
                logger.error(
                    "Failed to persist collection",
                    url=pair.url,
                    origin=pair.origin,
                    error=str(exc),
                    persisted=len(created),
                )
                raise CollectionBoxError(exc.kind, exc.message, partial=created) from exc
            created.append(collection)

        logger.info("Collections created", count=len(created))
        return created

    async def _create_or_refresh(self, url: str, origin: str) -> Collection:
        now = self._clock()
        collection = Collection(id=str(uuid.uuid4()), url=url, origin=origin, created_at=now)
        try:
            await self.store.create(collection)
        except CollectionBoxError as exc:
            if not exc.is_kind(ErrorKind.CONFLICT):
                raise
        else:
            observe_collection_created(origin)
            return collection

        await self.store.upsert_created_at(url, now)
        existing = await self.store.get_by_url(url)
        if existing is None:
            raise CollectionBoxError.internal(f"collection vanished during refresh: {url}")
        logger.debug("Collection refreshed", url=url, origin=existing.origin)
        return existing

    async def get_by_origin(self, origin: str) -> List[Collection]:
        if not origin:
            raise CollectionBoxError.invalid_argument(
                "the origin you want to search can't be empty"
            )
        return await self.store.get_by_origin(origin)

    async def get_by_time_range(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        origin: str = "",
    ) -> List[Collection]:
        """Return collections created in ``[start, end]``.

        ``end`` defaults to now and ``start`` to 24 hours before ``end``.
        The range must not reach into the future and may span at most 15 days.
        """
        now = self._clock()
        end = _as_utc(end) if end is not None else now
        start = _as_utc(start) if start is not None else end - DEFAULT_TIME_RANGE

        if end > now:
            raise CollectionBoxError.invalid_argument("can't get the url from future")
        if start >= end:
            raise CollectionBoxError.invalid_argument("start time can't be after end time")
        if end - start > MAX_TIME_RANGE:
            raise CollectionBoxError.invalid_argument("time range can't be longer than 15 days")

        return await self.store.get_by_time_range(start, end, origin)

    async def get_all_grouped_by_origin(self) -> Dict[str, List[Collection]]:
        return await self.store.get_all_grouped_by_origin()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


__all__ = ["CollectionService", "MAX_TIME_RANGE", "DEFAULT_TIME_RANGE"]
