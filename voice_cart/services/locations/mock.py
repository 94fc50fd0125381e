"""
Mock Location Directory

In-memory phone number map for development mode. The default map sends the
configured default restaurant number to the demo menu location.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

from voice_cart.core.config import get_settings
from voice_cart.core.errors import NotFoundError
from voice_cart.services.cart.models import RestaurantKey
from voice_cart.services.locations.base import BaseLocationDirectory
from voice_cart.services.menu.mock import DEMO_RESTAURANT

logger = logging.getLogger(__name__)


class InMemoryLocationDirectory(BaseLocationDirectory):
    """Phone number map held in process memory."""

    def __init__(self, numbers: Optional[dict[str, RestaurantKey]] = None):
        if numbers is None:
            numbers = {get_settings().default_restaurant_phone: DEMO_RESTAURANT}
        self._numbers = dict(numbers)
        logger.info(f"InMemoryLocationDirectory initialized ({len(self._numbers)} numbers)")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _lookup(self, phone_number: str) -> RestaurantKey:
        location = self._numbers.get(phone_number)
        if location is None:
            raise NotFoundError(f"No location found for phone number: {phone_number}")
        logger.debug(f"Found location: {location}")
        return location

    async def health_check(self) -> bool:
        return True
