"""
Modifier Resolver

Finds modifier options on a menu item and turns them into `AppliedModifier`
entries priced in dollars.

Two lookups exist:
    - find_modifier: general modifiers, exact (trimmed, case-sensitive) name
    - find_spice_level: spice levels, trimmed and case-insensitive

For two-piece items the piece scope selects one of the literal
"Choose Your First/Second Sandwich Mods" categories. For every other item
the scope is ignored and categories are searched in menu order.

A miss returns None; callers decide whether that is a user error.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from enum import Enum
from typing import Optional

from voice_cart.services.cart.models import (
    FIRST_PIECE_CATEGORY,
    SECOND_PIECE_CATEGORY,
    AppliedModifier,
    MenuItem,
    ModifierCategory,
    ModifierOption,
    cents_to_dollars,
)

logger = logging.getLogger(__name__)

SPICE_CATEGORY_MARKER = "spice level"


class PieceScope(str, Enum):
    """Which part of an item a modifier applies to."""
    WHOLE_ITEM = "whole_item"
    FIRST_PIECE = "first_piece"
    SECOND_PIECE = "second_piece"

    @property
    def label(self) -> str:
        return {
            PieceScope.WHOLE_ITEM: "whole item",
            PieceScope.FIRST_PIECE: "first piece",
            PieceScope.SECOND_PIECE: "second piece",
        }[self]


PIECE_CATEGORIES = {
    PieceScope.FIRST_PIECE: FIRST_PIECE_CATEGORY,
    PieceScope.SECOND_PIECE: SECOND_PIECE_CATEGORY,
}


def category_for_scope(scope: PieceScope) -> Optional[str]:
    """Return the bundled-item category label for a piece scope."""
    return PIECE_CATEGORIES.get(scope)


def _find_category(menu_item: MenuItem, category_name: str) -> Optional[ModifierCategory]:
    for category in menu_item.modifier_categories:
        if category.category_name == category_name:
            return category
    return None


def _apply(category: ModifierCategory, option: ModifierOption) -> AppliedModifier:
    return AppliedModifier(
        category=category.category_name,
        option_id=option.option_id,
        option_name=option.name,
        price_dollars=cents_to_dollars(option.price_cents),
        currency=option.currency,
    )


def find_modifier(
    menu_item: MenuItem,
    option_name: str,
    scope: PieceScope = PieceScope.WHOLE_ITEM,
) -> Optional[AppliedModifier]:
    """
    Resolve a general modifier by exact option name.

    Args:
        menu_item: Menu definition to search
        option_name: Requested option name (surrounding whitespace ignored)
        scope: Piece scope; only meaningful for two-piece items

    Returns:
        AppliedModifier, or None if no category/option matches
    """
    wanted = (option_name or "").strip()
    if not wanted:
        return None

    target = category_for_scope(scope) if menu_item.is_bundled else None

    if target is not None:
        category = _find_category(menu_item, target)
        if category is None or not category.options:
            logger.warning(f"Category '{target}' not found on '{menu_item.name}'")
            return None
        for option in category.options:
            if option.name.strip() == wanted:
                return _apply(category, option)
        logger.warning(f"Modifier '{wanted}' not found in category '{target}'")
        return None

    for category in menu_item.modifier_categories:
        for option in category.options:
            if option.name.strip() == wanted:
                return _apply(category, option)

    logger.warning(f"Modifier '{wanted}' not found on '{menu_item.name}'")
    return None


def find_spice_level(
    menu_item: MenuItem,
    spice_level: Optional[str],
    scope: PieceScope = PieceScope.FIRST_PIECE,
) -> Optional[AppliedModifier]:
    """
    Resolve a spice level (case-insensitive).

    Two-piece items look in the piece category named by `scope`; single
    items use the first category whose name contains "spice level".
    """
    wanted = (spice_level or "").strip().lower()
    if not wanted:
        return None

    category: Optional[ModifierCategory] = None
    target = category_for_scope(scope)

    if menu_item.is_bundled and target is not None:
        category = _find_category(menu_item, target)
    else:
        for candidate in menu_item.modifier_categories:
            if SPICE_CATEGORY_MARKER in candidate.category_name.lower():
                category = candidate
                break

    if category is None or not category.options:
        logger.info(f"No spice category found for {scope.label} of '{menu_item.name}'")
        return None

    for option in category.options:
        if option.name.strip().lower() == wanted:
            return _apply(category, option)

    logger.info(f"Spice level '{spice_level}' not found in category '{category.category_name}'")
    return None
