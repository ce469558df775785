"""Persistence layer for collections."""

from .base import CollectionStore
from .sql import SQLCollectionStore

__all__ = ["CollectionStore", "SQLCollectionStore"]
