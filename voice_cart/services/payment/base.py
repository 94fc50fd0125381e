"""
Payment Link Service Abstract Base Class

Defines the interface for hosted-checkout providers. The checkout service
hands over fully priced line items and receives a URL the caller can be
sent to pay.

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PaymentLineItem:
    """
    One priced line for the payment provider.

    Attributes:
        name: Display name shown on the checkout page
        quantity: Units ordered
        unit_amount_cents: Base price plus modifier prices, in cents
        currency: ISO currency code
        note: Special instructions for the kitchen
        catalog_object_id: POS variation id of the item
    """
    name: str
    quantity: int
    unit_amount_cents: int
    currency: str = "USD"
    note: str = ""
    catalog_object_id: str = ""

    @property
    def total_cents(self) -> int:
        return self.unit_amount_cents * self.quantity


@dataclass
class PaymentLinkResult:
    """
    Result of creating a payment link.

    Attributes:
        url: Hosted checkout URL
        link_id: Provider identifier of the checkout session
        amount_cents: Pre-tax amount the link was created for
        currency: ISO currency code
        metadata: Extra provider data
    """
    url: str
    link_id: str
    amount_cents: int
    currency: str = "usd"
    metadata: dict = field(default_factory=dict)


class BasePaymentLinkService(ABC):
    """Abstract base class for payment link providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g. "mock", "stripe")."""
        pass

    @abstractmethod
    async def create_payment_link(
        self,
        line_items: list[PaymentLineItem],
        description: str,
        reference_id: str,
        customer_name: Optional[str] = None,
    ) -> PaymentLinkResult:
        """
        Create a hosted checkout for the given line items.

        Args:
            line_items: Priced lines (never empty)
            description: Order description shown to the payer
            reference_id: Session id; also used for idempotency
            customer_name: Optional payer name for the order record

        Returns:
            PaymentLinkResult

        Raises:
            InternalError: If the provider rejects or cannot be reached
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the provider is reachable and configured."""
        pass
