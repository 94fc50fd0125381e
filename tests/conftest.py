"""
Shared fixtures: an in-memory cart store, a small menu for one test
location, and a cart engine wired to both.
"""

import pytest

from voice_cart.core.config import get_settings
from voice_cart.services.cart.engine import CartEngine
from voice_cart.services.cart.models import (
    FIRST_PIECE_CATEGORY,
    SECOND_PIECE_CATEGORY,
    MenuItem,
    RestaurantKey,
)
from voice_cart.services.cart_store.memory import InMemoryCartStore
from voice_cart.services.menu.mock import InMemoryMenuCatalog

RESTAURANT = RestaurantKey("Test Hot Chicken", "LOC_TEST")
RESTAURANT_PHONE = "+15550001111"
CALL_ID = "call_test_001"


def _option(option_id: str, name: str, price: int = 0) -> dict:
    return {"id": option_id, "name": name, "price": price, "currency": "USD"}


def _piece(n: int) -> list[dict]:
    return [
        _option(f"P{n}_MILD", "Mild"),
        _option(f"P{n}_HOT", "Hot"),
        _option(f"P{n}_CHEESE", f"Add cheese {n}", 100),
        _option(f"P{n}_NO_PICKLES", f"No Pickles {n}"),
    ]


TEST_MENU = {
    "Spicy Sandwich (2pc)": {
        "variation_id": "VAR_2PC",
        "price": 899,
        "currency": "USD",
        "modifiers": [
            {"category": FIRST_PIECE_CATEGORY, "options": _piece(1)},
            {"category": SECOND_PIECE_CATEGORY, "options": _piece(2)},
        ],
    },
    "Chicken Sandwich": {
        "variation_id": "VAR_SANDWICH",
        "price": 899,
        "currency": "USD",
        "modifiers": [
            {
                "category": "Choose Spice Level",
                "options": [_option("S_MILD", "Mild"), _option("S_HOT", "Hot")],
            },
            {
                "category": "Sandwich Mods",
                "options": [
                    _option("ADD_CHEESE", "Add cheese", 100),
                    _option("ADD_TENDER", "Add tender", 350),
                    _option("PICKLES_SIDE", "Pickles on the side"),
                ],
            },
        ],
    },
    "Fries": {"variation_id": "VAR_FRIES", "price": 299, "currency": "USD"},
    "Mac & Cheese": {"variation_id": "VAR_MAC", "price": 399, "currency": "USD"},
    "SODA": {"variation_id": "VAR_SODA", "price": 249, "currency": "USD"},
}


@pytest.fixture(autouse=True)
def development_settings(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "development")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> InMemoryCartStore:
    return InMemoryCartStore()


@pytest.fixture
def catalog() -> InMemoryMenuCatalog:
    return InMemoryMenuCatalog({RESTAURANT: TEST_MENU})


@pytest.fixture
def engine(store, catalog) -> CartEngine:
    return CartEngine(store, catalog, ttl_seconds=3600, write_retries=3)


@pytest.fixture
def sandwich_2pc() -> MenuItem:
    return MenuItem.from_catalog("Spicy Sandwich (2pc)", TEST_MENU["Spicy Sandwich (2pc)"])


@pytest.fixture
def chicken_sandwich() -> MenuItem:
    return MenuItem.from_catalog("Chicken Sandwich", TEST_MENU["Chicken Sandwich"])


@pytest.fixture
def fries() -> MenuItem:
    return MenuItem.from_catalog("Fries", TEST_MENU["Fries"])
