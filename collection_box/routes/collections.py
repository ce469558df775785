"""Collection endpoints: create, grouped reads and time-range queries."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..catalog import OriginCatalog
from ..dependencies import get_catalog, get_service
from ..schemas import (
    CollectionOut,
    CreateRequest,
    ErrorResponse,
    OriginsResponse,
    TimeRangeRequest,
)
from ..service import CollectionService

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid argument"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


@router.post("/create", response_model=List[CollectionOut], responses=ERROR_RESPONSES)
async def create_collections(
    payload: CreateRequest,
    service: CollectionService = Depends(get_service),
):
    """Store every supported URL found in the submitted text."""
    collections = await service.create_from_text(payload.url)
    return [CollectionOut.from_model(collection) for collection in collections]


@router.get(
    "/getbyorigin",
    response_model=Dict[str, List[CollectionOut]],
    responses=ERROR_RESPONSES,
)
async def get_by_origin(
    origin: str = Query(default=""),
    service: CollectionService = Depends(get_service),
):
    """Collections for one origin label, or all of them grouped by label.

    An empty ``origin`` is treated like a missing one.
    """
    if not origin:
        grouped = await service.get_all_grouped_by_origin()
        return {
            label: [CollectionOut.from_model(c) for c in items]
            for label, items in grouped.items()
        }

    collections = await service.get_by_origin(origin)
    return {origin: [CollectionOut.from_model(c) for c in collections]}


@router.post(
    "/getbytimerange", response_model=List[CollectionOut], responses=ERROR_RESPONSES
)
async def get_by_time_range(
    payload: Optional[TimeRangeRequest] = Body(default=None),
    service: CollectionService = Depends(get_service),
):
    """Collections created within ``[start, end]``, optionally for one origin."""
    payload = payload or TimeRangeRequest()
    collections = await service.get_by_time_range(
        start=payload.start, end=payload.end, origin=payload.origin
    )
    return [CollectionOut.from_model(collection) for collection in collections]


@router.get("/origins", response_model=OriginsResponse)
async def list_origins(catalog: OriginCatalog = Depends(get_catalog)):
    """Origin labels the service accepts."""
    return OriginsResponse(support=list(catalog.supported), origins=sorted(catalog.labels))
