"""FastAPI dependencies for dependency injection."""

import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.interfaces import IEmailNotifier, INotificationService, IPaymentGateway
from core.application.services.admin_alerts import AdminOrderAlertSubscriber
from core.application.services.discount_service import DiscountApplicationService
from core.application.services.notification_dispatcher import NotificationDispatcher
from core.application.services.order_service import OrderApplicationService
from core.application.services.payment_service import PaymentService
from core.application.services.status_service import OrderStatusService
from core.application.services.store_settings_service import StoreSettingsService
from core.application.services.webhook_service import PaymentWebhookService
from core.application.use_cases.create_order import CreateOrderUseCase
from core.domain.event_bus import EventBus
from core.infrastructure.adapters.notifications.mock_email_notifier import MockEmailNotifier
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.infrastructure.adapters.notifications.slack_notification_service import SlackNotificationService
from core.infrastructure.adapters.payments import PaystackClient
from core.infrastructure.cache import TTLCache
from core.infrastructure.database.config import create_session_factory, get_engine
from core.infrastructure.event_bus import get_event_bus as global_event_bus
from core.settings.modules import AppSettings, get_app_settings
from core.settings.modules.auth_settings import AuthSettings

load_dotenv()

logger = logging.getLogger(__name__)


def get_settings() -> AppSettings:
    return get_app_settings()


def get_auth_settings(settings: AppSettings = Depends(get_settings)) -> AuthSettings:
    return settings.auth


# =============================================================================
# DATABASE
# =============================================================================

_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get SQLAlchemy session factory.

    Returns:
        async_sessionmaker bound to the configured engine
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = create_session_factory(get_engine(get_app_settings().database))
    return _session_factory


# =============================================================================
# NOTIFICATIONS AND EVENTS (singleton instances)
# =============================================================================

_notification_service: Optional[INotificationService] = None
_email_notifier: Optional[IEmailNotifier] = None
_settings_cache: Optional[TTLCache] = None
_event_bus_wired = False


def get_notification_service() -> INotificationService:
    """Slack when configured, else the in-memory operator channel."""
    global _notification_service

    if _notification_service is None:
        slack = get_app_settings().slack
        if slack.enabled and slack.webhook_url:
            _notification_service = SlackNotificationService(slack)
        else:
            logger.info("Slack alerts disabled; using MockNotificationService")
            _notification_service = MockNotificationService()
    return _notification_service


def get_email_notifier() -> IEmailNotifier:
    global _email_notifier

    if _email_notifier is None:
        _email_notifier = MockEmailNotifier()
    return _email_notifier


def get_event_bus(
    notification_service: INotificationService = Depends(get_notification_service),
) -> EventBus:
    """Process-wide event bus with the admin alert subscriber attached."""
    global _event_bus_wired

    bus = global_event_bus()
    if not _event_bus_wired:
        bus.subscribe(AdminOrderAlertSubscriber(notification_service))
        _event_bus_wired = True
    return bus


def get_store_settings_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: AppSettings = Depends(get_settings),
) -> StoreSettingsService:
    """Store settings reader sharing one process-wide cache."""
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = TTLCache(ttl_seconds=settings.notifications.settings_cache_ttl_seconds)
    return StoreSettingsService(session_factory, _settings_cache)


def get_dispatcher(
    email_notifier: IEmailNotifier = Depends(get_email_notifier),
    store_settings: StoreSettingsService = Depends(get_store_settings_service),
    settings: AppSettings = Depends(get_settings),
) -> NotificationDispatcher:
    return NotificationDispatcher(email_notifier, store_settings, settings.notifications)


# =============================================================================
# PAYMENTS
# =============================================================================

def get_payment_gateway(settings: AppSettings = Depends(get_settings)) -> IPaymentGateway:
    return PaystackClient(settings.paystack)


# =============================================================================
# SERVICES
# =============================================================================

def get_create_order_use_case(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    event_bus: EventBus = Depends(get_event_bus),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    settings: AppSettings = Depends(get_settings),
) -> CreateOrderUseCase:
    return CreateOrderUseCase(
        session_factory,
        event_bus,
        dispatcher=dispatcher,
        checkout=settings.checkout,
    )


def get_status_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    event_bus: EventBus = Depends(get_event_bus),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    settings: AppSettings = Depends(get_settings),
) -> OrderStatusService:
    return OrderStatusService(
        session_factory,
        event_bus,
        dispatcher=dispatcher,
        checkout=settings.checkout,
    )


def get_order_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> OrderApplicationService:
    """Get OrderApplicationService instance.

    Returns:
        OrderApplicationService instance
    """
    return OrderApplicationService(session_factory)


def get_discount_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> DiscountApplicationService:
    return DiscountApplicationService(session_factory)


def get_payment_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    gateway: IPaymentGateway = Depends(get_payment_gateway),
    settings: AppSettings = Depends(get_settings),
) -> PaymentService:
    return PaymentService(session_factory, gateway, currency=settings.checkout.currency)


def get_webhook_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    create_order: CreateOrderUseCase = Depends(get_create_order_use_case),
    status_service: OrderStatusService = Depends(get_status_service),
    settings: AppSettings = Depends(get_settings),
) -> PaymentWebhookService:
    return PaymentWebhookService(
        session_factory,
        create_order=create_order,
        status_service=status_service,
        paystack=settings.paystack,
    )
