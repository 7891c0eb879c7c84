from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.settings.modules.api_settings import ApiSettings
from core.settings.modules.auth_settings import AuthSettings
from core.settings.modules.checkout_settings import CheckoutSettings
from core.settings.modules.database_settings import DatabaseSettings
from core.settings.modules.integrations_settings import SlackSettings
from core.settings.modules.notification_settings import NotificationSettings
from core.settings.modules.paystack_settings import PaystackSettings


class IntegrationsSettings(BaseModel):
    """Aggregates integrations settings as nested objects."""

    model_config = ConfigDict(extra="ignore")

    slack: SlackSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    api: ApiSettings
    database: DatabaseSettings
    auth: AuthSettings
    paystack: PaystackSettings
    checkout: CheckoutSettings
    notifications: NotificationSettings
    integrations: IntegrationsSettings

    @property
    def slack(self) -> SlackSettings:
        return self.integrations.slack


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        api=ApiSettings(),
        database=DatabaseSettings(),
        auth=AuthSettings(),
        paystack=PaystackSettings(),
        checkout=CheckoutSettings(),
        notifications=NotificationSettings(),
        integrations=IntegrationsSettings(slack=SlackSettings()),
    )
