"""
Menu Catalog Factory

Returns the in-memory demo catalog in development and the PostgreSQL
catalog otherwise.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from voice_cart.core.config import get_settings
from voice_cart.services.menu.base import BaseMenuCatalog
from voice_cart.services.menu.mock import InMemoryMenuCatalog, DEMO_RESTAURANT
from voice_cart.services.menu.sql import SqlMenuCatalog

logger = logging.getLogger(__name__)


@lru_cache()
def get_menu_catalog() -> BaseMenuCatalog:
    """Get the configured menu catalog."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Menu Catalog: Using InMemoryMenuCatalog (development mode)")
        return InMemoryMenuCatalog()

    logger.info(f"Menu Catalog: Using SqlMenuCatalog ({settings.env_mode.value} mode)")
    return SqlMenuCatalog()


def reset_menu_catalog() -> None:
    """Clear the cached catalog instance."""
    get_menu_catalog.cache_clear()


__all__ = [
    "get_menu_catalog",
    "reset_menu_catalog",
    "BaseMenuCatalog",
    "InMemoryMenuCatalog",
    "SqlMenuCatalog",
    "DEMO_RESTAURANT",
]
