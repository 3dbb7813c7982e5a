"""Unit schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UnitCreate(BaseModel):
    """Create unit request."""

    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1, max_length=512)
    duration: int = Field(default=60, ge=1, le=24 * 60)


class UnitUpdate(BaseModel):
    """Edit unit request; omitted fields stay unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = Field(default=None, min_length=1, max_length=512)
    duration: int | None = Field(default=None, ge=1, le=24 * 60)


class UnitRead(BaseModel):
    """Unit response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    address: str
    duration: int
    created_at: datetime
    updated_at: datetime
