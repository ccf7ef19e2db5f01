"""
Payment Gateway Unit Tests

Tests for the dummy gateway and the Stripe REST client.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from learnhub.core.config import settings
from learnhub.core.exceptions import PaymentGatewayError
from learnhub.services.payment_gateway import (
    DummyGateway,
    StripeGateway,
    get_payment_gateway,
    to_minor_units,
)


class TestHelpers:

    def test_to_minor_units(self):
        assert to_minor_units(Decimal("499")) == 49900
        assert to_minor_units(Decimal("19.99")) == 1999
        assert to_minor_units(Decimal("0.005")) == 1

    def test_dummy_without_stripe_key(self):
        assert isinstance(get_payment_gateway(), DummyGateway)

    def test_stripe_with_key(self, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")
        assert isinstance(get_payment_gateway(), StripeGateway)


class TestDummyGateway:

    @pytest.mark.asyncio
    async def test_issues_and_accepts_dummy_references(self):
        gateway = DummyGateway()

        intent = await gateway.create_intent(7, Decimal("10"), "usd")

        assert intent.is_dummy is True
        assert intent.reference == "dummy_pi_7"
        assert await gateway.verify(intent.reference, 7, Decimal("10")) is True
        assert await gateway.verify("pi_3NxLive", 7, Decimal("10")) is False
        assert await gateway.verify("dummy_pi_8", 7, Decimal("10")) is False


class TestStripeGateway:
    """Stripe calls with the HTTP helpers patched out."""

    @pytest.mark.asyncio
    async def test_create_intent_posts_form(self, mock_httpx_response):
        response = mock_httpx_response(
            status_code=200, json_data={"id": "pi_123", "client_secret": "pi_123_secret"}
        )
        post = AsyncMock(return_value=response)

        with patch("learnhub.services.payment_gateway.post_with_retry", post):
            gateway = StripeGateway("sk_test_123", "https://api.stripe.test/v1/")
            intent = await gateway.create_intent(5, Decimal("29.50"), "usd", metadata={"courseId": 3})

        assert intent.reference == "pi_123"
        assert intent.client_secret == "pi_123_secret"
        assert intent.is_dummy is False

        url = post.call_args.args[0]
        kwargs = post.call_args.kwargs
        assert url == "https://api.stripe.test/v1/payment_intents"
        assert kwargs["data"]["amount"] == "2950"
        assert kwargs["data"]["metadata[courseId]"] == "3"
        assert kwargs["headers"]["Authorization"] == "Bearer sk_test_123"
        assert kwargs["headers"]["Idempotency-Key"] == "payment-5"

    @pytest.mark.asyncio
    async def test_create_intent_rejected(self, mock_httpx_response):
        post = AsyncMock(return_value=mock_httpx_response(status_code=402, text="card_declined"))

        with patch("learnhub.services.payment_gateway.post_with_retry", post):
            with pytest.raises(PaymentGatewayError):
                await StripeGateway("sk", "https://api.stripe.test/v1").create_intent(
                    1, Decimal("10"), "usd"
                )

    @pytest.mark.asyncio
    async def test_create_intent_transport_error(self):
        post = AsyncMock(side_effect=httpx.ConnectError("down"))

        with patch("learnhub.services.payment_gateway.post_with_retry", post):
            with pytest.raises(PaymentGatewayError):
                await StripeGateway("sk", "https://api.stripe.test/v1").create_intent(
                    1, Decimal("10"), "usd"
                )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,json_data,expected",
        [
            (200, {"status": "succeeded", "amount": 2950, "metadata": {"paymentId": "5"}}, True),
            (200, {"status": "requires_payment_method", "amount": 2950, "metadata": {"paymentId": "5"}}, False),
            (200, {"status": "succeeded", "amount": 2950, "metadata": {"paymentId": "6"}}, False),
            (200, {"status": "succeeded", "amount": 100, "metadata": {"paymentId": "5"}}, False),
            (200, {"status": "succeeded", "amount": 2950}, False),
            (404, {}, False),
        ],
    )
    async def test_verify(self, mock_httpx_response, status_code, json_data, expected):
        get = AsyncMock(return_value=mock_httpx_response(status_code=status_code, json_data=json_data))

        with patch("learnhub.services.payment_gateway.get_with_retry", get):
            result = await StripeGateway("sk", "https://api.stripe.test/v1").verify(
                "pi_123", 5, Decimal("29.50")
            )

        assert result is expected
        assert get.call_args.args[0] == "https://api.stripe.test/v1/payment_intents/pi_123"

    @pytest.mark.asyncio
    async def test_verify_server_error(self, mock_httpx_response):
        get = AsyncMock(return_value=mock_httpx_response(status_code=503))

        with patch("learnhub.services.payment_gateway.get_with_retry", get):
            with pytest.raises(PaymentGatewayError):
                await StripeGateway("sk", "https://api.stripe.test/v1").verify(
                    "pi_123", 5, Decimal("29.50")
                )
