"""Shared fixtures: in-memory database, seed helpers and wired services."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import uuid4

import pytest
import pytest_asyncio

from core.application.services.notification_dispatcher import NotificationDispatcher
from core.application.services.status_service import OrderStatusService
from core.application.services.store_settings_service import StoreSettingsService
from core.application.use_cases.create_order import CreateOrderUseCase
from core.data.models import (
    DealProductModel,
    DiscountModel,
    ProductModel,
    StoreSettingModel,
)
from core.infrastructure.adapters.notifications.mock_email_notifier import MockEmailNotifier
from core.infrastructure.cache import TTLCache
from core.infrastructure.database.config import create_engine, create_session_factory, init_database
from core.settings.modules.checkout_settings import CheckoutSettings
from core.settings.modules.database_settings import DatabaseSettings
from core.settings.modules.notification_settings import NotificationSettings
from tests.mocks.recording_event_bus import RecordingEventBus

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def engine():
    """In-memory engine with SAVEPOINT support and all tables created."""
    test_engine = create_engine(DatabaseSettings(url=TEST_DATABASE_URL))
    await init_database(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def seed(session_factory):
    """Insert ORM rows directly."""

    async def _seed(*models) -> None:
        async with session_factory() as session:
            session.add_all(models)
            await session.commit()

    return _seed


# =============================================================================
# ROW FACTORIES
# =============================================================================

def discount_row(code: str = "SAVE10", type: str = "percentage", value: str = "10", **fields) -> DiscountModel:
    values: Dict[str, Any] = {
        "id": str(uuid4()),
        "code": code,
        "type": type,
        "value": Decimal(value),
        "minimum_amount": Decimal("0"),
        "applies_to": "all",
        "is_active": True,
        "used_count": 0,
    }
    values.update(fields)
    return DiscountModel(**values)


def product_row(product_id: Optional[str] = None, stock: int = 10, price: str = "100.00") -> ProductModel:
    return ProductModel(
        id=product_id or str(uuid4()),
        name="Wireless Mouse",
        price=Decimal(price),
        stock_quantity=stock,
        in_stock=stock > 0,
    )


def deal_row(deal_product_id: str = "deal-headphones", stock: Optional[int] = 5) -> DealProductModel:
    return DealProductModel(
        id=deal_product_id,
        deal_id="deal-42",
        name="Noise Cancelling Headphones",
        description="Over-ear, 30h battery",
        image="https://cdn.example.com/headphones.png",
        price=Decimal("150.00"),
        original_price=Decimal("200.00"),
        discount_percentage=Decimal("25"),
        stock_quantity=stock,
    )


def setting_row(key: str, value: str) -> StoreSettingModel:
    return StoreSettingModel(key=key, value=value)


def address(**overrides) -> Dict[str, Any]:
    data = {
        "full_name": "Ama Mensah",
        "email": "ama@example.com",
        "phone": "+233201234567",
        "street": "12 Ring Road",
        "city": "Accra",
        "region": "Greater Accra",
        "country": "Ghana",
    }
    data.update(overrides)
    return data


# =============================================================================
# SERVICES
# =============================================================================

@pytest.fixture
def event_bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def email_notifier() -> MockEmailNotifier:
    return MockEmailNotifier()


@pytest.fixture
def notification_settings() -> NotificationSettings:
    return NotificationSettings(ADMIN_EMAIL="admin@example.com")


@pytest.fixture
def store_settings(session_factory) -> StoreSettingsService:
    return StoreSettingsService(session_factory, TTLCache(ttl_seconds=300))


@pytest.fixture
def dispatcher(email_notifier, store_settings, notification_settings) -> NotificationDispatcher:
    return NotificationDispatcher(email_notifier, store_settings, notification_settings)


@pytest.fixture
def checkout_settings() -> CheckoutSettings:
    return CheckoutSettings()


@pytest.fixture
def create_order(session_factory, event_bus, dispatcher, checkout_settings) -> CreateOrderUseCase:
    return CreateOrderUseCase(
        session_factory,
        event_bus,
        dispatcher=dispatcher,
        checkout=checkout_settings,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def status_service(session_factory, event_bus, dispatcher, checkout_settings) -> OrderStatusService:
    return OrderStatusService(session_factory, event_bus, dispatcher=dispatcher, checkout=checkout_settings)
