"""
Paystack REST client.

Thin aiohttp wrapper over the two endpoints checkout needs:
``POST /transaction/initialize`` and ``GET /transaction/verify/{reference}``.
"""
import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.application.interfaces import IPaymentGateway
from core.domain.exceptions import PaymentGatewayError
from core.settings.modules.paystack_settings import PaystackSettings


logger = logging.getLogger(__name__)


def compute_signature(secret_key: str, raw_body: bytes) -> str:
    """Hex HMAC-SHA512 of the raw webhook body, as Paystack sends it."""
    return hmac.new(secret_key.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()


def verify_signature(secret_key: str, raw_body: bytes, signature: Optional[str]) -> bool:
    if not secret_key or not signature:
        return False
    return hmac.compare_digest(compute_signature(secret_key, raw_body), signature)


class PaystackClient(IPaymentGateway):
    """
    Paystack implementation of the payment gateway.

    Every call opens its own ClientSession; transport errors and
    ``status: false`` responses surface as PaymentGatewayError.
    """

    def __init__(self, settings: PaystackSettings):
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=settings.timeout_seconds)

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.secret_key}",
            "Content-Type": "application/json",
        }

    async def initialize_transaction(
        self,
        email: str,
        amount: int,
        reference: Optional[str] = None,
        callback_url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"email": email, "amount": int(round(amount))}
        if reference:
            payload["reference"] = reference
        if callback_url:
            payload["callback_url"] = callback_url
        if metadata:
            payload["metadata"] = metadata

        logger.info(f"Initializing Paystack transaction {reference or '(gateway reference)'}")
        return await self._request("POST", "/transaction/initialize", json=payload)

    async def verify_transaction(self, reference: str) -> Dict[str, Any]:
        logger.info(f"Verifying Paystack transaction {reference}")
        return await self._request("GET", f"/transaction/verify/{reference}")

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.settings.secret_key:
            raise PaymentGatewayError("Paystack secret key not configured")

        url = f"{self.base_url}{path}"
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(method, url, headers=self._headers, **kwargs) as response:
                    body = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.error(f"❌ Paystack {method} {path} failed: {e}", exc_info=True)
            raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e

        if not isinstance(body, dict) or not body.get("status"):
            message = body.get("message") if isinstance(body, dict) else None
            logger.error(f"❌ Paystack {method} {path} rejected: {message}")
            raise PaymentGatewayError(message or "Payment gateway request failed")

        return body.get("data") or {}
