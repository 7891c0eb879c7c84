"""Pytest configuration and fixtures for integration tests."""

from typing import AsyncGenerator, Optional

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from apps.api.deps import (
    get_email_notifier,
    get_event_bus,
    get_payment_gateway,
    get_session_factory,
    get_settings,
    get_store_settings_service,
)
from apps.api.main import app
from core.application.services.store_settings_service import StoreSettingsService
from core.infrastructure.adapters.payments import compute_signature
from core.infrastructure.cache import TTLCache
from core.settings.modules import (
    ApiSettings,
    AppSettings,
    AuthSettings,
    CheckoutSettings,
    DatabaseSettings,
    IntegrationsSettings,
    NotificationSettings,
    PaystackSettings,
    SlackSettings,
)
from tests.mocks.mock_payment_gateway import MockPaymentGateway

JWT_SECRET = "integration-test-secret-with-enough-bytes"
PAYSTACK_SECRET = "sk_test_integration"


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        api=ApiSettings(),
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
        auth=AuthSettings(jwt_secret=JWT_SECRET),
        paystack=PaystackSettings(secret_key=PAYSTACK_SECRET),
        checkout=CheckoutSettings(),
        notifications=NotificationSettings(ADMIN_EMAIL="admin@example.com"),
        integrations=IntegrationsSettings(slack=SlackSettings(enabled=False)),
    )


@pytest.fixture
def gateway() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest_asyncio.fixture
async def client(
    app_settings, session_factory, event_bus, email_notifier, gateway
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the in-memory database and mocks."""
    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_event_bus] = lambda: event_bus
    app.dependency_overrides[get_email_notifier] = lambda: email_notifier
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_store_settings_service] = lambda: StoreSettingsService(
        session_factory, TTLCache(ttl_seconds=0)
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    # Cleanup
    app.dependency_overrides.clear()


def bearer(user_id: str, role: Optional[str] = "customer", email: Optional[str] = None) -> dict:
    claims = {"sub": user_id, "role": role}
    if email:
        claims["email"] = email
    token = jwt.encode(claims, JWT_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers() -> dict:
    return bearer("user-1", email="ama@example.com")


@pytest.fixture
def other_customer_headers() -> dict:
    return bearer("user-2", email="kofi@example.com")


@pytest.fixture
def admin_headers() -> dict:
    return bearer("admin-1", role="admin")


@pytest.fixture
def sign():
    """Signs a raw webhook body the way Paystack does."""

    def _sign(body: bytes) -> str:
        return compute_signature(PAYSTACK_SECRET, body)

    return _sign
