"""Application state container for the collection box."""

from dataclasses import dataclass
from typing import Optional

from .catalog import OriginCatalog
from .core import Settings, get_logger
from .extractor import URLExtractor
from .service import CollectionService
from .storage import CollectionStore, SQLCollectionStore

logger = get_logger(__name__)


@dataclass
class CollectionBoxState:
    """Runtime components attached to the FastAPI app."""

    settings: Settings
    catalog: OriginCatalog
    store: CollectionStore
    extractor: URLExtractor
    service: CollectionService


async def initialize_state(settings: Optional[Settings] = None) -> CollectionBoxState:
    """Load the catalog, open the store and wire the service.

    Raises ``CollectionBoxError`` when the catalog or the store cannot be
    loaded; both are fatal at startup.
    """
    resolved_settings = settings or Settings()

    catalog = OriginCatalog.from_file(resolved_settings.origin_file)
    store = SQLCollectionStore(
        resolved_settings.database_url,
        db_log_level=resolved_settings.db_log_level,
        slow_query_ms=resolved_settings.slow_query_ms,
    )
    await store.open()

    extractor = URLExtractor(catalog)
    service = CollectionService(store, extractor)

    return CollectionBoxState(
        settings=resolved_settings,
        catalog=catalog,
        store=store,
        extractor=extractor,
        service=service,
    )


async def close_state(state: CollectionBoxState) -> None:
    await state.store.close()
