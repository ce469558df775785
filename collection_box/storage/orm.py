"""SQLAlchemy table definition for collections."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from ..models import Collection


class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, hands back timezone-aware UTC datetimes."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class CollectionRow(Base):
    """Persisted collection; ``url`` is unique."""

    __tablename__ = "collections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    origin: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        Index("idx_collections_url", "url", unique=True),
        Index("idx_collections_origin", "origin"),
        Index("idx_collections_created_at", "created_at"),
    )

    @classmethod
    def from_model(cls, collection: Collection) -> "CollectionRow":
        return cls(
            id=collection.id,
            url=collection.url,
            origin=collection.origin,
            created_at=collection.created_at,
        )

    def to_model(self) -> Collection:
        return Collection(
            id=self.id,
            url=self.url,
            origin=self.origin,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<CollectionRow(id={self.id}, origin={self.origin}, url={self.url})>"
