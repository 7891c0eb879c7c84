from __future__ import annotations

from pydantic import Field

from core.settings.base import StorefrontBaseSettings


class SlackSettings(StorefrontBaseSettings):
    """
    Slack integration settings (admin order alerts).
    Loaded from .env file with exact variable name matching.
    """

    enabled: bool = Field(default=False, alias="STOREFRONT_SLACK_ENABLED")
    webhook_url: str = Field(default="", alias="SLACK_WEBHOOK_URL")
    prefix: str = Field(default="[STOREFRONT]", alias="STOREFRONT_SLACK_PREFIX")
