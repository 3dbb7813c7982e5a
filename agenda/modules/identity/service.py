"""Coordinator authentication."""

from __future__ import annotations

import logging

from fastapi import Depends

from agenda.core.config import Settings, get_settings
from agenda.core.security import create_access_token, decode_token, oauth2_scheme, verify_password
from agenda.modules.identity.schemas import AccessToken, CoordinatorRead, LoginRequest
from agenda.shared.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

COORDINATOR_ROLE = "coordinator"


class IdentityService:
    """Single coordinator account configured through settings."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def login(self, payload: LoginRequest) -> AccessToken:
        """Check credentials and issue an access token."""
        password_hash = self.settings.coordinator_password_hash
        if not password_hash:
            raise UnauthorizedException("Acesso da coordenação não configurado")

        if payload.username != self.settings.coordinator_username or not verify_password(
            payload.password,
            password_hash,
        ):
            logger.warning("Rejected coordinator login for %r", payload.username)
            raise UnauthorizedException("Usuário ou senha inválidos")

        return AccessToken(access_token=create_access_token(subject=payload.username, role=COORDINATOR_ROLE))

    def get_coordinator_from_token(self, token: str) -> CoordinatorRead:
        payload = decode_token(token)
        if payload.get("type") != "access" or payload.get("role") != COORDINATOR_ROLE:
            raise UnauthorizedException("Token de acesso inválido")

        subject = payload.get("sub")
        if subject != self.settings.coordinator_username:
            raise UnauthorizedException("Token de acesso inválido")
        return CoordinatorRead(username=subject)


def get_identity_service() -> IdentityService:
    """Dependency to provide identity service."""
    return IdentityService(get_settings())


async def get_current_coordinator(
    token: str = Depends(oauth2_scheme),
    service: IdentityService = Depends(get_identity_service),
) -> CoordinatorRead:
    """Resolve the authenticated coordinator from the bearer token."""
    return service.get_coordinator_from_token(token)
