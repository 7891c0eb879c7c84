from __future__ import annotations

from pydantic import Field

from core.settings.base import StorefrontBaseSettings


class PaystackSettings(StorefrontBaseSettings):
    """
    Paystack gateway settings.
    The secret key signs webhooks and authenticates API calls.
    """

    secret_key: str = Field(default="", alias="PAYSTACK_SECRET_KEY")
    base_url: str = Field(default="https://api.paystack.co", alias="PAYSTACK_BASE_URL")
    timeout_seconds: float = Field(default=30.0, alias="PAYSTACK_TIMEOUT_SECONDS")
    signature_header: str = Field(default="X-Paystack-Signature", alias="PAYSTACK_SIGNATURE_HEADER")
