"""
                        Services Module

Business services with the hybrid Mock/Real architecture. Each backend has
an in-memory or mock implementation for development and a real one for
staging/production, selected by ENV_MODE.

Services:
    - cart: cart engine, modifier resolver, speech formatter, checkout
    - cart_store: session cart persistence (memory / Redis)
    - menu: per-location menu catalog (memory / PostgreSQL)
    - locations: phone number → restaurant location (memory / PostgreSQL)
    - payment: hosted payment links (mock / Stripe)
"""

from functools import lru_cache

from voice_cart.services.cart.checkout import CheckoutResult, CheckoutService
from voice_cart.services.cart.engine import CartEngine
from voice_cart.services.cart_store import get_cart_store, reset_cart_store
from voice_cart.services.locations import get_location_directory, reset_location_directory
from voice_cart.services.menu import get_menu_catalog, reset_menu_catalog
from voice_cart.services.payment import get_payment_link_service, reset_payment_link_service


@lru_cache()
def get_cart_engine() -> CartEngine:
    """Cart engine wired to the configured store and menu catalog."""
    return CartEngine(get_cart_store(), get_menu_catalog())


@lru_cache()
def get_checkout_service() -> CheckoutService:
    return CheckoutService(get_cart_store(), get_payment_link_service())


def reset_services() -> None:
    """Clear every cached service instance (used by tests)."""
    get_cart_engine.cache_clear()
    get_checkout_service.cache_clear()
    reset_cart_store()
    reset_menu_catalog()
    reset_location_directory()
    reset_payment_link_service()


__all__ = [
    "get_cart_engine",
    "get_checkout_service",
    "get_cart_store",
    "get_menu_catalog",
    "get_location_directory",
    "get_payment_link_service",
    "reset_services",
    "CartEngine",
    "CheckoutService",
    "CheckoutResult",
]
