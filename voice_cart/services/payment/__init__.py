"""
Payment Link Service Factory

Usage:
    from voice_cart.services.payment import get_payment_link_service

    service = get_payment_link_service()
    result = await service.create_payment_link(lines, "Order", call_id)

Environment Switching:
    - ENV_MODE=development → MockPaymentLinkService (no API calls)
    - ENV_MODE=staging → StripePaymentLinkService (test keys)
    - ENV_MODE=production → StripePaymentLinkService (live keys)

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from voice_cart.core.config import get_settings
from voice_cart.core.credentials import CredentialProvider, settings_secret_fetcher
from voice_cart.services.payment.base import (
    BasePaymentLinkService,
    PaymentLineItem,
    PaymentLinkResult,
)
from voice_cart.services.payment.mock import MockPaymentLinkService
from voice_cart.services.payment.stripe import StripePaymentLinkService

logger = logging.getLogger(__name__)


@lru_cache()
def get_payment_link_service() -> BasePaymentLinkService:
    """Get the configured payment link service instance."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Payment Links: Using MockPaymentLinkService (development mode)")
        return MockPaymentLinkService(min_latency=0.2, max_latency=0.6)

    logger.info(f"Payment Links: Using StripePaymentLinkService ({settings.env_mode.value} mode)")
    credentials = CredentialProvider(settings_secret_fetcher(settings))
    return StripePaymentLinkService(credentials)


def reset_payment_link_service() -> None:
    """Clear the cached payment link service instance."""
    get_payment_link_service.cache_clear()


__all__ = [
    "get_payment_link_service",
    "reset_payment_link_service",
    "BasePaymentLinkService",
    "MockPaymentLinkService",
    "StripePaymentLinkService",
    "PaymentLineItem",
    "PaymentLinkResult",
]
