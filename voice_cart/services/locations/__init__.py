"""
Location Directory Factory

Returns the in-memory phone map in development and the PostgreSQL-backed
directory otherwise.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from voice_cart.core.config import get_settings
from voice_cart.services.locations.base import BaseLocationDirectory
from voice_cart.services.locations.mock import InMemoryLocationDirectory
from voice_cart.services.locations.sql import SqlLocationDirectory

logger = logging.getLogger(__name__)


@lru_cache()
def get_location_directory() -> BaseLocationDirectory:
    """Get the configured location directory."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Location Directory: Using InMemoryLocationDirectory (development mode)")
        return InMemoryLocationDirectory()

    logger.info(f"Location Directory: Using SqlLocationDirectory ({settings.env_mode.value} mode)")
    return SqlLocationDirectory()


def reset_location_directory() -> None:
    """Clear the cached directory instance."""
    get_location_directory.cache_clear()


__all__ = [
    "get_location_directory",
    "reset_location_directory",
    "BaseLocationDirectory",
    "InMemoryLocationDirectory",
    "SqlLocationDirectory",
]
