"""Search history Pydantic schemas.

Request and response models for the /search endpoints.

A search history record captures one location-risk lookup: the place the
user searched for, the computed risk score, optional coordinates, and the
analysis payload the client rendered (opaque JSON).
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchHistoryCreate(BaseModel):
    """Request schema for recording a search."""

    location_name: str = Field(..., max_length=500)
    user_id: UUID | None = None
    risk_score: int | None = None
    search_data: Any | None = None
    latitude: Decimal | None = Field(default=None, ge=-90, le=90)
    longitude: Decimal | None = Field(default=None, ge=-180, le=180)
    city: str | None = None
    state: str | None = None

    @field_validator("location_name")
    @classmethod
    def location_name_not_blank(cls, v: str) -> str:
        """Strip whitespace and reject blank names."""
        v = v.strip()
        if not v:
            raise ValueError("location_name cannot be blank")
        return v


class SearchHistoryOut(BaseModel):
    """Response schema for a search history record."""

    id: UUID
    user_id: UUID | None = None
    location_name: str | None = None
    risk_score: int | None = None
    search_data: Any | None = None
    latitude: Decimal | None = None
    longitude: Decimal | None = None
    city: str | None = None
    state: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
