"""Unit tests for Paystack signature helpers and client error handling."""

import hashlib
import hmac

import pytest

from core.domain.exceptions import PaymentGatewayError
from core.infrastructure.adapters.payments import PaystackClient, compute_signature, verify_signature
from core.settings.modules.paystack_settings import PaystackSettings

SECRET = "sk_test_secret"
BODY = b'{"event":"charge.success","data":{"reference":"TXN-ABC123"}}'


def test_signature_is_hex_hmac_sha512():
    expected = hmac.new(SECRET.encode(), BODY, hashlib.sha512).hexdigest()

    assert compute_signature(SECRET, BODY) == expected
    assert len(expected) == 128


def test_verify_signature():
    signature = compute_signature(SECRET, BODY)

    assert verify_signature(SECRET, BODY, signature) is True
    assert verify_signature(SECRET, BODY + b" ", signature) is False
    assert verify_signature("other", BODY, signature) is False


def test_missing_secret_or_signature_never_verifies():
    assert verify_signature("", BODY, compute_signature("", BODY)) is False
    assert verify_signature(SECRET, BODY, None) is False
    assert verify_signature(SECRET, BODY, "") is False


@pytest.mark.asyncio
async def test_client_without_secret_raises_gateway_error():
    client = PaystackClient(PaystackSettings(secret_key=""))

    with pytest.raises(PaymentGatewayError):
        await client.verify_transaction("TXN-ABC123")
