"""Embedded relational store backed by SQLAlchemy's asyncio extension."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import literal_column, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..core.errors import CollectionBoxError
from ..core.logging import get_logger
from ..models import Collection
from .base import CollectionStore
from .diagnostics import attach_query_diagnostics
from .orm import Base, CollectionRow

logger = get_logger(__name__)


class SQLCollectionStore(CollectionStore):
    """Collection store for any SQLAlchemy async URL (SQLite by default)."""

    def __init__(
        self,
        database_url: str,
        *,
        db_log_level: str = "warn",
        slow_query_ms: int = 200,
    ) -> None:
        self.database_url = database_url
        self.db_log_level = db_log_level
        self.slow_query_ms = slow_query_ms
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    async def open(self) -> None:
        if self._engine is not None:
            return

        try:
            engine = create_async_engine(self.database_url)
        except (SQLAlchemyError, ImportError) as exc:
            raise CollectionBoxError.internal(f"failed to open store: {exc}") from exc

        attach_query_diagnostics(engine, self.db_log_level, self.slow_query_ms)

        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            await engine.dispose()
            raise CollectionBoxError.internal(f"failed to open store: {exc}") from exc

        self._engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        logger.info("Collection store opened", url=engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Collection store closed")

    def _session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise CollectionBoxError.internal("store is not open")
        return self._sessionmaker()

    async def create(self, collection: Collection) -> None:
        try:
            async with self._session() as session, session.begin():
                session.add(CollectionRow.from_model(collection))
        except IntegrityError as exc:
            raise CollectionBoxError.conflict(f"url already exists: {collection.url}") from exc
        except SQLAlchemyError as exc:
            raise CollectionBoxError.internal(str(exc)) from exc

    async def upsert_created_at(self, url: str, created_at: datetime) -> bool:
        stmt = (
            update(CollectionRow)
            .where(CollectionRow.url == url, CollectionRow.created_at <= created_at)
            .values(created_at=created_at)
        )
        try:
            async with self._session() as session, session.begin():
                result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise CollectionBoxError.internal(str(exc)) from exc
        return bool(result.rowcount)

    async def get_by_url(self, url: str) -> Optional[Collection]:
        stmt = select(CollectionRow).where(CollectionRow.url == url)
        try:
            async with self._session() as session:
                row = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise CollectionBoxError.internal(str(exc)) from exc
        return row.to_model() if row is not None else None

    async def get_by_origin(self, origin: str) -> List[Collection]:
        stmt = (
            select(CollectionRow)
            .where(CollectionRow.origin == origin)
            .order_by(CollectionRow.created_at, CollectionRow.id)
        )
        return await self._fetch(stmt)

    async def get_by_time_range(
        self, start: datetime, end: datetime, origin: str = ""
    ) -> List[Collection]:
        stmt = select(CollectionRow).where(CollectionRow.created_at.between(start, end))
        if origin:
            stmt = stmt.where(CollectionRow.origin == origin)
        stmt = stmt.order_by(CollectionRow.created_at, CollectionRow.id)
        return await self._fetch(stmt)

    async def get_all_grouped_by_origin(self) -> Dict[str, List[Collection]]:
        # rowid is SQLite's insertion order; refreshing created_at does not move it
        stmt = select(CollectionRow).order_by(CollectionRow.origin, literal_column("rowid"))
        grouped: Dict[str, List[Collection]] = {}
        for collection in await self._fetch(stmt):
            grouped.setdefault(collection.origin, []).append(collection)
        return grouped

    async def _fetch(self, stmt) -> List[Collection]:
        try:
            async with self._session() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            raise CollectionBoxError.internal(str(exc)) from exc
        return [row.to_model() for row in rows]


__all__ = ["SQLCollectionStore"]
