"""Bearer token authentication for the REST API."""

import logging
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.application.actor import Actor
from core.domain.exceptions import AuthenticationError, AuthorizationError
from core.settings.modules.auth_settings import AuthSettings

from apps.api.deps import get_auth_settings

logger = logging.getLogger(__name__)
bearer = HTTPBearer(auto_error=False)


def decode_actor(token: str, settings: AuthSettings) -> Actor:
    """Verify ``token`` and build the Actor from its claims.

    Raises:
        AuthenticationError: bad signature, expired token or no subject
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError("Invalid or expired token") from e

    subject = claims.get("sub") or claims.get("user_id")
    if not subject:
        raise AuthenticationError("Token has no subject")

    return Actor(
        id=str(subject),
        email=claims.get("email"),
        role=claims.get("role"),
        full_name=claims.get("full_name"),
        phone=claims.get("phone"),
        admin_roles=frozenset(role.lower() for role in settings.admin_roles),
    )


async def get_optional_actor(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: AuthSettings = Depends(get_auth_settings),
) -> Optional[Actor]:
    """Actor for optionally-authenticated routes; a bad token counts as a guest."""
    if creds is None:
        return None
    try:
        return decode_actor(creds.credentials, settings)
    except AuthenticationError:
        return None


async def get_current_actor(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: AuthSettings = Depends(get_auth_settings),
) -> Actor:
    if creds is None:
        raise AuthenticationError("Not authenticated")
    return decode_actor(creds.credentials, settings)


async def get_admin_actor(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")
    return actor
