"""
Cart Domain Models

Pydantic models for menu definitions and session cart contents.

Menu rows arrive in the catalog's wire shape (cents, `modifiers` list with
`category`/`options`) and are parsed once into immutable `MenuItem` objects.
Cart line items are mutable and carry dollar amounts as `Decimal` so totals
stay exact; they are persisted as JSON documents via `model_dump(mode="json")`.

Author: Khalil Bannouri
Version: 1.0.0
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# Literal category labels used by the POS for two-piece items
FIRST_PIECE_CATEGORY = "Choose Your First Sandwich Mods"
SECOND_PIECE_CATEGORY = "Choose Your Second Sandwich Mods"

# Marker in an item name that identifies a two-piece bundle
BUNDLED_MARKER = "(2pc)"

DEFAULT_CURRENCY = "USD"

CENTS_PER_DOLLAR = Decimal(100)


def cents_to_dollars(cents: int) -> Decimal:
    """Convert integer cents to an exact Decimal dollar amount."""
    return Decimal(int(cents)) / CENTS_PER_DOLLAR


def dollars_to_cents(dollars: Decimal) -> int:
    """Convert a Decimal dollar amount back to integer cents."""
    return int((Decimal(dollars) * CENTS_PER_DOLLAR).to_integral_value())


def is_bundled_item(item_name: str) -> bool:
    """Two-piece items carry the literal "(2pc)" in their name."""
    return BUNDLED_MARKER in item_name


@dataclass(frozen=True)
class RestaurantKey:
    """Identifies one restaurant location and therefore one menu."""
    restaurant_name: str
    location_id: str

    def __str__(self) -> str:
        return f"{self.restaurant_name} ({self.location_id})"


# =============================================================================
# MENU
# =============================================================================

class ModifierOption(BaseModel):
    """A single selectable choice inside a modifier category."""
    model_config = ConfigDict(frozen=True)

    option_id: str
    name: str
    price_cents: int = 0
    currency: str = DEFAULT_CURRENCY


class ModifierCategory(BaseModel):
    """A named group of modifier options (e.g. a spice level)."""
    model_config = ConfigDict(frozen=True)

    category_name: str
    options: tuple[ModifierOption, ...] = ()


class MenuItem(BaseModel):
    """
    A menu item as served by the catalog.

    Attributes:
        variation_id: POS catalog variation identifier
        name: Display name, also the catalog lookup key
        price: Base price in integer cents
        currency: ISO currency code
        description: Free-text description
        modifier_categories: Available modifier groups
    """
    model_config = ConfigDict(frozen=True)

    variation_id: str
    name: str
    price: int
    currency: str = DEFAULT_CURRENCY
    description: str = ""
    modifier_categories: tuple[ModifierCategory, ...] = ()

    @property
    def is_bundled(self) -> bool:
        return is_bundled_item(self.name)

    @classmethod
    def from_catalog(cls, name: str, raw: dict[str, Any]) -> "MenuItem":
        """
        Parse a catalog row.

        Example row:
            {
                "variation_id": "VAR123",
                "price": 899,
                "currency": "USD",
                "description": "Two hot chicken sandwiches",
                "modifiers": [
                    {
                        "category": "Choose Your First Sandwich Mods",
                        "options": [{"id": "OPT1", "name": "Mild", "price": 0}]
                    }
                ]
            }
        """
        categories = []
        for raw_category in raw.get("modifiers") or []:
            options = tuple(
                ModifierOption(
                    option_id=str(opt.get("id", "")),
                    name=opt.get("name", ""),
                    price_cents=int(opt.get("price") or 0),
                    currency=opt.get("currency") or DEFAULT_CURRENCY,
                )
                for opt in raw_category.get("options") or []
            )
            categories.append(
                ModifierCategory(
                    category_name=raw_category.get("category", ""),
                    options=options,
                )
            )

        return cls(
            variation_id=str(raw.get("variation_id", "")),
            name=name,
            price=int(raw.get("price") or 0),
            currency=raw.get("currency") or DEFAULT_CURRENCY,
            description=raw.get("description") or "",
            modifier_categories=tuple(categories),
        )


# =============================================================================
# CART
# =============================================================================

class AppliedModifier(BaseModel):
    """A modifier option attached to a cart line item."""

    category: str
    option_id: str
    option_name: str
    price_dollars: Decimal
    currency: str = DEFAULT_CURRENCY


class CartLineItem(BaseModel):
    """
    One line of a session cart.

    Invariant:
        line_total_dollars == (unit_price_dollars + Σ modifier prices) * quantity
    which `recompute_total()` restores after every mutation.
    """

    variation_id: str
    item_name: str
    unit_price_dollars: Decimal
    currency: str = DEFAULT_CURRENCY
    quantity: int = Field(ge=1)
    special_instructions: str = ""
    description: str = ""
    modifiers: list[AppliedModifier] = Field(default_factory=list)
    line_total_dollars: Decimal = Decimal(0)

    @classmethod
    def from_menu_item(
        cls,
        menu_item: MenuItem,
        quantity: int,
        special_instructions: str = "",
    ) -> "CartLineItem":
        item = cls(
            variation_id=menu_item.variation_id,
            item_name=menu_item.name,
            unit_price_dollars=cents_to_dollars(menu_item.price),
            currency=menu_item.currency,
            quantity=quantity,
            special_instructions=special_instructions,
            description=menu_item.description,
        )
        item.recompute_total()
        return item

    @property
    def is_bundled(self) -> bool:
        return is_bundled_item(self.item_name)

    @property
    def modifier_total_dollars(self) -> Decimal:
        return sum((m.price_dollars for m in self.modifiers), Decimal(0))

    @property
    def unit_price_cents(self) -> int:
        return dollars_to_cents(self.unit_price_dollars)

    def recompute_total(self) -> Decimal:
        self.line_total_dollars = (
            self.unit_price_dollars + self.modifier_total_dollars
        ) * self.quantity
        return self.line_total_dollars

    def has_option(self, option_id: str) -> bool:
        return any(m.option_id == option_id for m in self.modifiers)

    def merge_key(self) -> tuple[str, str, tuple[str, ...]]:
        """Identity used to combine duplicate lines (modifier order ignored)."""
        return (
            self.variation_id,
            self.special_instructions,
            tuple(sorted(m.option_id for m in self.modifiers)),
        )

    def is_mergeable_with(self, other: "CartLineItem") -> bool:
        return self.merge_key() == other.merge_key()


class CartSnapshot(BaseModel):
    """Cart contents together with the store version they were read at."""

    items: list[CartLineItem] = Field(default_factory=list)
    version: int = 0


# =============================================================================
# OPERATION RESULTS
# =============================================================================

class AddItemResult(BaseModel):
    line_item: CartLineItem
    merged: bool = False
    skipped_modifiers: list[str] = Field(default_factory=list)
    message: str = ""


class ModifierChangeResult(BaseModel):
    """Outcome of adding or removing modifiers on one cart line."""
    line_item: CartLineItem
    added: list[AppliedModifier] = Field(default_factory=list)
    removed: list[AppliedModifier] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    message: str = ""


class RemoveItemResult(BaseModel):
    item_name: str
    removed_quantity: int
    remaining_quantity: int = 0
    message: str = ""


class CartSummary(BaseModel):
    subtotal_dollars: Decimal = Decimal(0)
    item_count: int = 0
    speech_summary: str
    items: list[CartLineItem] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.item_count == 0


def line_items_from_documents(documents: Optional[list[dict[str, Any]]]) -> list[CartLineItem]:
    """Parse persisted cart documents back into line items."""
    return [CartLineItem.model_validate(doc) for doc in documents or []]


def line_items_to_documents(items: list[CartLineItem]) -> list[dict[str, Any]]:
    """Serialize line items into JSON-safe documents for persistence."""
    return [item.model_dump(mode="json") for item in items]
