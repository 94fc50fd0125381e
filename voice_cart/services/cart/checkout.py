"""
Checkout Service

Turns a session cart into a hosted payment link. Each cart line becomes a
payment line whose unit amount is the base price plus every modifier
price, in cents. Tax is computed by the payment provider.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

from pydantic import BaseModel

from voice_cart.core.errors import ValidationError
from voice_cart.services.cart.models import (
    CartLineItem,
    RestaurantKey,
    dollars_to_cents,
)
from voice_cart.services.cart_store.base import BaseCartStore
from voice_cart.services.payment.base import BasePaymentLinkService, PaymentLineItem

logger = logging.getLogger(__name__)


class CheckoutResult(BaseModel):
    payment_link: str
    link_id: str
    line_items: list[dict]
    subtotal_cents: int
    item_count: int


def to_payment_line(item: CartLineItem) -> PaymentLineItem:
    """Fold modifier prices into the unit amount of one payment line."""
    modifier_cents = sum(dollars_to_cents(m.price_dollars) for m in item.modifiers)
    return PaymentLineItem(
        name=item.item_name,
        quantity=item.quantity,
        unit_amount_cents=item.unit_price_cents + modifier_cents,
        currency=item.currency,
        note=item.special_instructions,
        catalog_object_id=item.variation_id,
    )


class CheckoutService:
    """
    Creates payment links for session carts.

    Args:
        store: Session cart persistence (read only here)
        payments: Payment link provider
    """

    def __init__(self, store: BaseCartStore, payments: BasePaymentLinkService):
        self.store = store
        self.payments = payments

    async def create_payment_link(
        self,
        session_id: str,
        restaurant: RestaurantKey,
        customer_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CheckoutResult:
        """
        Raises:
            ValidationError: Missing session id or empty cart
            InternalError: Payment provider failure
        """
        if not session_id or not session_id.strip():
            raise ValidationError("Missing call ID in request")

        items = await self.store.get(session_id)
        if not items:
            raise ValidationError("Cart is empty. Please add items first.")

        lines = [to_payment_line(item) for item in items]
        item_count = sum(line.quantity for line in lines)
        description = description or f"{restaurant.restaurant_name} order - {item_count} items"

        logger.info(f"Creating payment link for {session_id}: {len(lines)} lines, {item_count} items")

        link = await self.payments.create_payment_link(
            lines,
            description=description,
            reference_id=session_id,
            customer_name=customer_name,
        )

        return CheckoutResult(
            payment_link=link.url,
            link_id=link.link_id,
            line_items=[
                {
                    "name": line.name,
                    "quantity": line.quantity,
                    "unitAmountCents": line.unit_amount_cents,
                    "currency": line.currency,
                    "note": line.note,
                    "catalogObjectId": line.catalog_object_id,
                }
                for line in lines
            ],
            subtotal_cents=sum(line.total_cents for line in lines),
            item_count=item_count,
        )
