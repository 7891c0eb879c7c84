from __future__ import annotations

from typing import List

from pydantic import Field

from core.settings.base import StorefrontBaseSettings


class AuthSettings(StorefrontBaseSettings):
    """
    Bearer token verification.
    Tokens are issued by the storefront's auth service; we only verify them.
    """

    jwt_secret: str = Field(default="change-me", alias="AUTH_JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="AUTH_JWT_ALGORITHM")
    admin_roles: List[str] = Field(default=["admin", "superadmin"], alias="AUTH_ADMIN_ROLES")
