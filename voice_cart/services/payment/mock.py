"""
Mock Payment Link Service

Returns fake checkout URLs without calling any provider.
Used in development mode (ENV_MODE=development) and in tests.

Behavior:
    - Optional simulated latency
    - Generates Stripe-like ids (cs_mock_xxx)
    - Remembers every link it created in `created`

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging
import random
import uuid
from typing import Optional

from voice_cart.core.config import get_settings
from voice_cart.services.payment.base import (
    BasePaymentLinkService,
    PaymentLineItem,
    PaymentLinkResult,
)

logger = logging.getLogger(__name__)


class MockPaymentLinkService(BasePaymentLinkService):
    """
    Mock payment link provider.

    Args:
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
    """

    def __init__(self, min_latency: float = 0.0, max_latency: float = 0.0):
        self.min_latency = min_latency
        self.max_latency = max(max_latency, min_latency)
        self.created: list[PaymentLinkResult] = []
        logger.info(
            f"MockPaymentLinkService initialized "
            f"(latency={self.min_latency}-{self.max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    async def create_payment_link(
        self,
        line_items: list[PaymentLineItem],
        description: str,
        reference_id: str,
        customer_name: Optional[str] = None,
    ) -> PaymentLinkResult:
        await self._simulate_latency()

        link_id = f"cs_mock_{uuid.uuid4().hex[:24]}"
        base_url = get_settings().app_base_url.rstrip("/")
        result = PaymentLinkResult(
            url=f"{base_url}/mock-checkout/{link_id}",
            link_id=link_id,
            amount_cents=sum(line.total_cents for line in line_items),
            currency=(line_items[0].currency if line_items else "usd").lower(),
            metadata={
                "reference_id": reference_id,
                "description": description,
                "customer_name": customer_name or "",
            },
        )
        self.created.append(result)

        logger.info(
            f"Mock: Payment link {link_id} created for {reference_id} "
            f"(${result.amount_cents / 100:.2f})"
        )
        return result

    async def health_check(self) -> bool:
        return True
