"""Identity API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from agenda.modules.identity.schemas import AccessToken, CoordinatorRead, LoginRequest
from agenda.modules.identity.service import IdentityService, get_current_coordinator, get_identity_service

router = APIRouter(prefix="/identity", tags=["identity"])


@router.post("/auth/login", response_model=AccessToken)
async def login(
    payload: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> AccessToken:
    """Sign in as coordinator and return a bearer token."""
    return service.login(payload)


@router.get("/me", response_model=CoordinatorRead)
async def get_me(current_coordinator: CoordinatorRead = Depends(get_current_coordinator)) -> CoordinatorRead:
    """Return the authenticated coordinator."""
    return current_coordinator
