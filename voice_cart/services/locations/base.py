"""
Location Directory Abstract Base Class

Resolves the restaurant phone number a caller dialled to the restaurant
location that owns it. Every cart operation needs this to pick the menu.

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod

from voice_cart.core.errors import ValidationError
from voice_cart.services.cart.models import RestaurantKey


class BaseLocationDirectory(ABC):
    """Abstract base class for phone number → location lookups."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    async def resolve(self, phone_number: str) -> RestaurantKey:
        """
        Look up the location for a dialled number.

        Raises:
            ValidationError: If the number is blank
            NotFoundError: If the number is not mapped
        """
        number = (phone_number or "").strip()
        if not number:
            raise ValidationError("Phone number is required for location lookup")
        return await self._lookup(number)

    @abstractmethod
    async def _lookup(self, phone_number: str) -> RestaurantKey:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check backend connectivity."""
        pass
