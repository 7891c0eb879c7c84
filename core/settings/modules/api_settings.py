from __future__ import annotations

from typing import List

from pydantic import Field

from core.settings.base import StorefrontBaseSettings


class ApiSettings(StorefrontBaseSettings):
    """HTTP surface settings."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ORIGINS",
    )
