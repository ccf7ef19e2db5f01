"""
Payment Gateway

Collaborator that creates payment intents and verifies external payment
references. StripeGateway talks to the Stripe REST API; DummyGateway is used
when no Stripe key is configured and accepts only the references it issued.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import httpx

from learnhub.core.config import settings
from learnhub.core.exceptions import PaymentGatewayError
from learnhub.core.http_client import get_with_retry, post_with_retry


logger = logging.getLogger(__name__)

DUMMY_PREFIX = "dummy_"


@dataclass
class PaymentIntent:
    """Handle returned to the client for out-of-band confirmation."""
    reference: str
    client_secret: str
    is_dummy: bool = False


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount to cents."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class DummyGateway:
    """Gateway stand-in for development and demos."""

    is_dummy = True

    async def create_intent(
        self,
        payment_id: int,
        amount: Decimal,
        currency: str,
        metadata: Optional[dict] = None,
    ) -> PaymentIntent:
        return PaymentIntent(
            reference=f"{DUMMY_PREFIX}pi_{payment_id}",
            client_secret=f"{DUMMY_PREFIX}client_secret_{payment_id}",
            is_dummy=True,
        )

    async def verify(self, reference: str, payment_id: int, amount: Decimal) -> bool:
        return reference == f"{DUMMY_PREFIX}pi_{payment_id}"


class StripeGateway:
    """Stripe PaymentIntents over the shared httpx client."""

    is_dummy = False

    def __init__(self, secret_key: str, api_base: str):
        self._secret_key = secret_key
        self._api_base = api_base.rstrip("/")

    @property
    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self._secret_key}"}

    async def create_intent(
        self,
        payment_id: int,
        amount: Decimal,
        currency: str,
        metadata: Optional[dict] = None,
    ) -> PaymentIntent:
        """
        Create a Stripe PaymentIntent.

        Raises:
            PaymentGatewayError: Transport failure or non-2xx response.
        """
        form = {
            "amount": str(to_minor_units(amount)),
            "currency": currency,
            "metadata[paymentId]": str(payment_id),
        }
        for key, value in (metadata or {}).items():
            form[f"metadata[{key}]"] = str(value)

        try:
            response = await post_with_retry(
                f"{self._api_base}/payment_intents",
                data=form,
                headers={**self._headers, "Idempotency-Key": f"payment-{payment_id}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Stripe create_intent failed for payment {payment_id}: {e}")
            raise PaymentGatewayError()

        if response.status_code >= 400:
            logger.error(
                f"Stripe create_intent rejected payment {payment_id}: "
                f"{response.status_code} {response.text}"
            )
            raise PaymentGatewayError()

        data = response.json()
        return PaymentIntent(reference=data["id"], client_secret=data["client_secret"])

    async def verify(self, reference: str, payment_id: int, amount: Decimal) -> bool:
        """
        Check that a PaymentIntent succeeded and belongs to the payment.

        The intent must carry the payment's id in its metadata and charge
        exactly the payment's amount.

        Returns:
            True only for a matching intent with status 'succeeded';
            unknown or mismatched intents are False.

        Raises:
            PaymentGatewayError: Transport failure or 5xx response.
        """
        try:
            response = await get_with_retry(
                f"{self._api_base}/payment_intents/{reference}",
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"Stripe verification failed for {reference}: {e}")
            raise PaymentGatewayError()

        if response.status_code >= 500:
            raise PaymentGatewayError()

        if response.status_code != 200:
            logger.info(f"Stripe has no usable intent {reference}: {response.status_code}")
            return False

        intent = response.json()
        if intent.get("status") != "succeeded":
            return False

        if str(intent.get("metadata", {}).get("paymentId")) != str(payment_id):
            logger.warning(f"Stripe intent {reference} does not belong to payment {payment_id}")
            return False

        if intent.get("amount") != to_minor_units(amount):
            logger.warning(
                f"Stripe intent {reference} charged {intent.get('amount')}, "
                f"expected {to_minor_units(amount)} for payment {payment_id}"
            )
            return False

        return True


def get_payment_gateway():
    """Gateway for the current configuration."""
    if settings.payments_are_mocked:
        return DummyGateway()
    return StripeGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_API_BASE)
