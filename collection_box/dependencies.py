"""FastAPI dependency helpers."""

from fastapi import Depends, HTTPException, Request

from .catalog import OriginCatalog
from .service import CollectionService
from .state import CollectionBoxState


def get_state(request: Request) -> CollectionBoxState:
    """Return the state stored on the FastAPI application."""
    state = getattr(request.app.state, "collection_box", None)
    if not state:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return state


def get_catalog(state: CollectionBoxState = Depends(get_state)) -> OriginCatalog:
    return state.catalog


def get_service(state: CollectionBoxState = Depends(get_state)) -> CollectionService:
    return state.service
