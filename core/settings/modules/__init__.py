# Settings modules
from .app_settings import AppSettings, get_app_settings, IntegrationsSettings
from .api_settings import ApiSettings
from .auth_settings import AuthSettings
from .checkout_settings import CheckoutSettings
from .database_settings import DatabaseSettings
from .integrations_settings import SlackSettings
from .notification_settings import NotificationSettings
from .paystack_settings import PaystackSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "IntegrationsSettings",
    "ApiSettings",
    "AuthSettings",
    "CheckoutSettings",
    "DatabaseSettings",
    "NotificationSettings",
    "PaystackSettings",
    "SlackSettings",
]
