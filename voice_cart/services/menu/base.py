"""
Menu Catalog Abstract Base Class

Read-only access to per-location menus. Implementations return a mapping
from item name to `MenuItem`; the cart engine looks items up by the exact
name the voice agent sends.

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod

from voice_cart.services.cart.models import MenuItem, RestaurantKey


class BaseMenuCatalog(ABC):
    """Abstract base class for menu catalog accessors."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def get_menu(self, restaurant: RestaurantKey) -> dict[str, MenuItem]:
        """
        Fetch a location's menu.

        Args:
            restaurant: Restaurant name + location id

        Returns:
            dict: Item name → MenuItem

        Raises:
            NotFoundError: If no menu exists for the location
            InternalError: On backend failure
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check backend connectivity."""
        pass


def parse_catalog_items(raw_items: dict) -> dict[str, MenuItem]:
    """Parse a catalog document (item name → raw row) into menu items."""
    return {
        name: MenuItem.from_catalog(name, raw)
        for name, raw in (raw_items or {}).items()
        if isinstance(raw, dict)
    }
