"""Origin catalog: the host -> origin label allow-list loaded at startup."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError

from .core.errors import CollectionBoxError
from .core.logging import get_logger

logger = get_logger(__name__)


class OriginItem(BaseModel):
    host: str = Field(min_length=1)
    origin: str = Field(min_length=1)


class OriginDocument(BaseModel):
    """Shape of the origin configuration file."""

    support: List[str] = Field(default_factory=list)
    items: List[OriginItem] = Field(default_factory=list)


class OriginCatalog:
    """Read-only mapping from registrable domain to origin label."""

    def __init__(self, mapping: Mapping[str, str], supported: Iterable[str] = ()) -> None:
        normalized = {host.strip().lower(): origin for host, origin in mapping.items()}
        if not normalized:
            raise CollectionBoxError.internal("origin map is empty")
        self._origins = MappingProxyType(normalized)
        self._supported: Tuple[str, ...] = tuple(supported)
        self._labels: FrozenSet[str] = frozenset(normalized.values())

    @classmethod
    def from_document(cls, document: OriginDocument) -> "OriginCatalog":
        mapping = {item.host: item.origin for item in document.items}
        return cls(mapping, document.support)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "OriginCatalog":
        """Load the catalog; every failure is fatal for the caller."""
        file_path = Path(path)
        try:
            raw = file_path.read_bytes()
        except OSError as exc:
            raise CollectionBoxError.internal(f"failed to read origin file: {exc}") from exc

        try:
            document = OriginDocument.model_validate_json(raw)
        except ValidationError as exc:
            raise CollectionBoxError.internal(f"failed to unmarshal origin file: {exc}") from exc

        if not document.items:
            raise CollectionBoxError.internal(f"origin map is empty, check file: {file_path}")

        catalog = cls.from_document(document)
        logger.info(
            "Origin catalog loaded",
            path=str(file_path),
            hosts=len(catalog),
            labels=len(catalog.labels),
        )
        return catalog

    def lookup(self, host: str) -> Optional[str]:
        """Return the origin label for a registrable domain, if supported."""
        return self._origins.get(host.lower())

    @property
    def labels(self) -> FrozenSet[str]:
        return self._labels

    @property
    def supported(self) -> Tuple[str, ...]:
        """Advisory display list from the ``support`` field."""
        return self._supported

    @property
    def hosts(self) -> Mapping[str, str]:
        return self._origins

    def __contains__(self, host: object) -> bool:
        return isinstance(host, str) and host.lower() in self._origins

    def __len__(self) -> int:
        return len(self._origins)


__all__ = ["OriginCatalog", "OriginDocument", "OriginItem"]
