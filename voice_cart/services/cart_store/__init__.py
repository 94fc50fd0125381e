"""
Cart Store Factory

Returns the in-memory store in development and the Redis store otherwise.

Usage:
    from voice_cart.services.cart_store import get_cart_store

    store = get_cart_store()
    items = await store.get("call_abc123")

Environment Switching:
    - ENV_MODE=development → InMemoryCartStore
    - ENV_MODE=staging/production → RedisCartStore

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from voice_cart.core.config import get_settings
from voice_cart.services.cart_store.base import BaseCartStore
from voice_cart.services.cart_store.memory import InMemoryCartStore
from voice_cart.services.cart_store.redis_store import RedisCartStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_cart_store() -> BaseCartStore:
    """
    Get the configured cart store instance.

    The instance is cached so every request in the process shares the same
    connection pool (or, in development, the same in-memory carts).
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Cart Store: Using InMemoryCartStore (development mode)")
        return InMemoryCartStore()

    logger.info(f"Cart Store: Using RedisCartStore ({settings.env_mode.value} mode)")
    return RedisCartStore()


def reset_cart_store() -> None:
    """Clear the cached cart store instance."""
    get_cart_store.cache_clear()
    logger.debug("Cart store cache cleared")


__all__ = [
    "get_cart_store",
    "reset_cart_store",
    "BaseCartStore",
    "InMemoryCartStore",
    "RedisCartStore",
]
