"""Identity schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Coordinator credentials."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class AccessToken(BaseModel):
    """Bearer token response."""

    access_token: str
    token_type: str = "bearer"


class CoordinatorRead(BaseModel):
    """Authenticated coordinator."""

    username: str
