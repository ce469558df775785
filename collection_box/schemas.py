"""Pydantic models used by the HTTP routes."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .models import Collection


class CreateRequest(BaseModel):
    url: str = ""


class TimeRangeRequest(BaseModel):
    origin: str = ""
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class CollectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    origin: str
    created_at: datetime

    @classmethod
    def from_model(cls, collection: Collection) -> "CollectionOut":
        return cls.model_validate(collection)


class ErrorResponse(BaseModel):
    error: str


class OriginsResponse(BaseModel):
    support: List[str]
    origins: List[str]


class HealthResponse(BaseModel):
    status: str
    service: str
