"""
Stripe Payment Link Service

Creates Stripe Checkout Sessions (mode="payment") from priced cart lines.
Used when ENV_MODE=production or ENV_MODE=staging.

The secret key is not read from module state: every request asks the
injected `CredentialProvider` for a token, so a rotated key is picked up
when the cached one expires.

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import hashlib
import json
import logging
from typing import Optional

import stripe

from voice_cart.core.config import get_settings
from voice_cart.core.credentials import CredentialProvider
from voice_cart.core.errors import InternalError
from voice_cart.services.payment.base import (
    BasePaymentLinkService,
    PaymentLineItem,
    PaymentLinkResult,
)

logger = logging.getLogger(__name__)

STRIPE_API_VERSION = "2023-10-16"


class StripePaymentLinkService(BasePaymentLinkService):
    """
    Stripe Checkout implementation.

    Args:
        credentials: Provider of the Stripe secret key
        success_url: Where Stripe sends the payer after paying
        cancel_url: Where Stripe sends the payer on cancel
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ):
        settings = get_settings()
        base_url = settings.app_base_url.rstrip("/")

        self._credentials = credentials
        self._currency = settings.stripe_currency
        self._success_url = success_url or f"{base_url}/checkout/success"
        self._cancel_url = cancel_url or f"{base_url}/checkout/cancel"

        logger.info(f"StripePaymentLinkService initialized (api_version={STRIPE_API_VERSION})")

    @property
    def provider_name(self) -> str:
        return "stripe"

    def _price_data(self, line: PaymentLineItem) -> dict:
        product_data = {"name": line.name}
        if line.note:
            product_data["description"] = line.note
        if line.catalog_object_id:
            product_data["metadata"] = {"catalog_object_id": line.catalog_object_id}

        return {
            "price_data": {
                "currency": (line.currency or self._currency).lower(),
                "unit_amount": line.unit_amount_cents,
                "product_data": product_data,
            },
            "quantity": line.quantity,
        }

    @staticmethod
    def _idempotency_key(
        line_items: list[PaymentLineItem],
        description: str,
        reference_id: str,
        customer_name: Optional[str],
    ) -> str:
        """Same call and same request body give the same key; any cart change gives a new one."""
        request = {
            "lines": [
                [line.name, line.quantity, line.unit_amount_cents, line.note, line.catalog_object_id]
                for line in line_items
            ],
            "description": description,
            "customer_name": customer_name or "",
        }
        digest = hashlib.sha256(json.dumps(request, sort_keys=True).encode()).hexdigest()
        return f"checkout-{reference_id}-{digest[:32]}"

    async def create_payment_link(
        self,
        line_items: list[PaymentLineItem],
        description: str,
        reference_id: str,
        customer_name: Optional[str] = None,
    ) -> PaymentLinkResult:
        api_key = await self._credentials.get_token()
        amount_cents = sum(line.total_cents for line in line_items)

        logger.info(f"Stripe: Creating checkout session for {reference_id} (${amount_cents / 100:.2f})")

        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                api_key=api_key,
                stripe_version=STRIPE_API_VERSION,
                idempotency_key=self._idempotency_key(line_items, description, reference_id, customer_name),
                mode="payment",
                line_items=[self._price_data(line) for line in line_items],
                client_reference_id=reference_id,
                success_url=self._success_url,
                cancel_url=self._cancel_url,
                metadata={
                    "description": description,
                    "customer_name": customer_name or "",
                    "source": "voice_cart",
                },
            )
        except stripe.AuthenticationError as e:
            self._credentials.invalidate()
            logger.error(f"Stripe: Authentication failed - {e}")
            raise InternalError("Payment provider authentication failed")
        except stripe.StripeError as e:
            logger.error(f"Stripe: Checkout session failed - {e}")
            raise InternalError("Failed to create payment link", {"details": str(e)})

        logger.info(f"Stripe: Checkout session created - {session.id}")

        return PaymentLinkResult(
            url=session.url,
            link_id=session.id,
            amount_cents=amount_cents,
            currency=(line_items[0].currency if line_items else self._currency).lower(),
            metadata={"status": session.status},
        )

    async def health_check(self) -> bool:
        try:
            api_key = await self._credentials.get_token()
            await asyncio.to_thread(stripe.Balance.retrieve, api_key=api_key)
            return True
        except (stripe.StripeError, InternalError) as e:
            logger.error(f"Stripe health check failed: {e}")
            return False
