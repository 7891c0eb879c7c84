from __future__ import annotations

from typing import Optional

from pydantic import Field

from core.settings.base import StorefrontBaseSettings


class NotificationSettings(StorefrontBaseSettings):
    """
    Email toggles used when the store_settings table has no value for a key,
    plus the store settings cache lifetime.
    """

    email_notifications_enabled: bool = Field(default=True, alias="EMAIL_NOTIFICATIONS_ENABLED")
    email_order_confirmation: bool = Field(default=True, alias="EMAIL_ORDER_CONFIRMATION")
    email_order_shipped: bool = Field(default=True, alias="EMAIL_ORDER_SHIPPED")
    email_order_delivered: bool = Field(default=True, alias="EMAIL_ORDER_DELIVERED")
    admin_email: Optional[str] = Field(default=None, alias="ADMIN_EMAIL")
    settings_cache_ttl_seconds: float = Field(default=300.0, alias="SETTINGS_CACHE_TTL_SECONDS")

    def default_for(self, key: str) -> bool:
        return bool(getattr(self, key, False))
