"""
Mock Menu Catalog

In-memory menu catalog used in development mode (ENV_MODE=development).
Ships one demo location so the whole call flow can be exercised locally
without a database.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Any, Optional

from voice_cart.core.errors import NotFoundError
from voice_cart.services.cart.models import (
    FIRST_PIECE_CATEGORY,
    SECOND_PIECE_CATEGORY,
    MenuItem,
    RestaurantKey,
)
from voice_cart.services.menu.base import BaseMenuCatalog, parse_catalog_items

logger = logging.getLogger(__name__)

DEMO_RESTAURANT = RestaurantKey("The Red Bird Hot Chicken & Fries", "L1RNWD28M2J3M")

_SPICE_NAMES = ["Original", "Mild", "Medium", "Hot", "Extra Hot", "FCK YOU CRA"]


def _options(prefix: str, names: list[str], price: int = 0) -> list[dict[str, Any]]:
    return [
        {"id": f"{prefix}_{i}", "name": name, "price": price, "currency": "USD"}
        for i, name in enumerate(names)
    ]


def _piece_mods(piece: int) -> list[dict[str, Any]]:
    prefix = f"P{piece}"
    return (
        _options(f"{prefix}_SPICE", _SPICE_NAMES)
        + _options(f"{prefix}_CHEESE", [f"Add cheese {piece}"], price=100)
        + _options(
            f"{prefix}_REMOVE",
            [f"No Pickles {piece}", f"No Slaw {piece}", f"No Big Bird Sauce {piece}"],
        )
    )


DEMO_MENU_ITEMS: dict[str, dict[str, Any]] = {
    "Spicy Sandwich (2pc)": {
        "variation_id": "VAR_SANDWICH_2PC",
        "price": 1499,
        "currency": "USD",
        "description": "Two hot chicken sandwiches with slaw and pickles",
        "modifiers": [
            {"category": FIRST_PIECE_CATEGORY, "options": _piece_mods(1)},
            {"category": SECOND_PIECE_CATEGORY, "options": _piece_mods(2)},
        ],
    },
    "Chicken Sandwich": {
        "variation_id": "VAR_SANDWICH",
        "price": 899,
        "currency": "USD",
        "description": "Hot chicken sandwich with slaw and pickles",
        "modifiers": [
            {"category": "Choose Spice Level", "options": _options("SPICE", _SPICE_NAMES)},
            {
                "category": "Sandwich Mods",
                "options": _options("ADD_CHEESE", ["Add cheese"], price=100)
                + _options("ADD_TENDER", ["Add tender"], price=350)
                + _options("SIDES", ["Pickles on the side", "Slaw on the side", "Chicken & Bun Only"]),
            },
        ],
    },
    "Tenders (3pc)": {
        "variation_id": "VAR_TENDERS_3PC",
        "price": 1199,
        "currency": "USD",
        "description": "Three hot chicken tenders with fries",
        "modifiers": [
            {"category": "Tender Spice Level", "options": _options("T_SPICE", _SPICE_NAMES)},
            {
                "category": "Substitutions",
                "options": _options(
                    "T_SUB",
                    ["Substitute fries with mac & cheese", "Substitute fries with slaw"],
                    price=150,
                ),
            },
        ],
    },
    "Fries": {"variation_id": "VAR_FRIES", "price": 299, "currency": "USD"},
    "Cheese Fries": {"variation_id": "VAR_CHEESE_FRIES", "price": 449, "currency": "USD"},
    "Mac & Cheese": {"variation_id": "VAR_MAC", "price": 399, "currency": "USD"},
    "Slaw": {"variation_id": "VAR_SLAW", "price": 249, "currency": "USD"},
    "Toffee Cake": {"variation_id": "VAR_TOFFEE", "price": 499, "currency": "USD"},
    "SODA": {
        "variation_id": "VAR_SODA",
        "price": 249,
        "currency": "USD",
        "description": "Fountain drink; flavour goes in special instructions",
    },
}


class InMemoryMenuCatalog(BaseMenuCatalog):
    """
    Menu catalog held in process memory.

    Args:
        menus: Restaurant key → catalog document (item name → raw row).
               Defaults to the demo location.
    """

    def __init__(self, menus: Optional[dict[RestaurantKey, dict[str, Any]]] = None):
        source = menus if menus is not None else {DEMO_RESTAURANT: DEMO_MENU_ITEMS}
        self._menus = {key: parse_catalog_items(items) for key, items in source.items()}
        logger.info(f"InMemoryMenuCatalog initialized ({len(self._menus)} locations)")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def get_menu(self, restaurant: RestaurantKey) -> dict[str, MenuItem]:
        menu = self._menus.get(restaurant)
        if menu is None:
            raise NotFoundError(f"No menu found for {restaurant}")
        return menu

    async def health_check(self) -> bool:
        return True
