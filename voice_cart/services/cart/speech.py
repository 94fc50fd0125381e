"""
Speech Formatter

Turns cart contents into sentences the voice agent can read aloud, and
builds the pre-checkout upsell offer.

Example:
    >>> render_cart(items, Decimal("17.98"))
    '1 Spicy Sandwich (2 piece) - first sandwich mild, second sandwich hot.
     Your total is $17.98 plus tax'
"""

import re
from decimal import Decimal
from typing import Iterable

from voice_cart.services.cart.models import AppliedModifier, CartLineItem

EMPTY_CART_SPEECH = "Your cart is empty."

# Applied in order to item names before speaking them
NAME_SUBSTITUTIONS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"(\d+)pc\b"), r"\1 piece"),
    (re.compile(r"FCK YOU CRA"), "F.C.K."),
]

# Exact option names
MODIFIER_PHRASES: dict[str, str] = {
    # Spice levels
    "Original": "original",
    "Mild": "mild",
    "Medium": "medium",
    "Hot": "hot",
    "Extra Hot": "extra hot",
    "FCK YOU CRA": "f you cray",
    # Add-ons
    "Add tender": "with extra tender",
    # Sides
    "Pickles on the side": "pickles on the side",
    "Slaw on the side": "slaw on the side",
    "Chicken & Bun Only": "chicken and bun only",
    # Substitutions
    "Substitute fries with mac & cheese": "substitute fries with mac and cheese",
    "Substitute fries with slaw": "substitute fries with slaw",
}

# Option names that carry a piece suffix (" 1" / " 2"), matched by substring
MODIFIER_PHRASE_FRAGMENTS: list[tuple[str, str]] = [
    ("Add cheese", "with cheese"),
    ("No cheese", "no cheese"),
    ("No Pickles", "no pickles"),
    ("No Slaw", "no slaw"),
    ("No Big Bird Sauce", "no sauce"),
    ("Substitute Slaw with Lettuce", "substitute slaw with lettuce"),
]

_TRAILING_DIGITS = re.compile(r"\d+$")

FIRST_PIECE_SUFFIX = " 1"
SECOND_PIECE_SUFFIX = " 2"


def modifier_to_speech(option_name: str) -> str:
    """Map a POS modifier name to a natural phrase."""
    if option_name in MODIFIER_PHRASES:
        return MODIFIER_PHRASES[option_name]
    for fragment, phrase in MODIFIER_PHRASE_FRAGMENTS:
        if fragment in option_name:
            return phrase
    return _TRAILING_DIGITS.sub("", option_name.lower()).strip()


def describe_modifiers(modifiers: Iterable[AppliedModifier]) -> str:
    """
    Group modifiers by piece and build the spoken clause.

    Returns an empty string when there is nothing to say, otherwise a clause
    starting with " - ".
    """
    first: list[str] = []
    second: list[str] = []
    whole: list[str] = []

    for modifier in modifiers:
        phrase = modifier_to_speech(modifier.option_name)
        if modifier.option_name.endswith(FIRST_PIECE_SUFFIX):
            first.append(phrase)
        elif modifier.option_name.endswith(SECOND_PIECE_SUFFIX):
            second.append(phrase)
        else:
            whole.append(phrase)

    descriptions = []
    if first:
        descriptions.append(f"first sandwich {' '.join(first)}")
    if second:
        descriptions.append(f"second sandwich {' '.join(second)}")
    descriptions.extend(whole)

    return f" - {', '.join(descriptions)}" if descriptions else ""


def spoken_item_name(item: CartLineItem) -> str:
    name = item.item_name or "Unknown Item"

    # Sodas are one POS item; the flavour lives in the instructions
    if name.upper() == "SODA" and item.special_instructions:
        name = item.special_instructions

    for pattern, replacement in NAME_SUBSTITUTIONS:
        name = pattern.sub(replacement, name)
    return name


def describe_item(item: CartLineItem) -> str:
    return f"{item.quantity} {spoken_item_name(item)}{describe_modifiers(item.modifiers)}"


def render_cart(items: list[CartLineItem], subtotal_dollars: Decimal) -> str:
    """Render the whole cart with its subtotal."""
    if not items:
        return EMPTY_CART_SPEECH

    items_text = ", ".join(describe_item(item) for item in items)
    total = Decimal(subtotal_dollars or 0).quantize(Decimal("0.01"))
    return f"{items_text}. Your total is ${total} plus tax"


# =============================================================================
# UPSELL
# =============================================================================

UPSELL_PREFIX = "Before I confirm, would you like to add "

# (substring found in cart item names, phrase offered when it is absent)
UPSELL_SIDES: list[tuple[str, str]] = [
    ("fries", "regular fries, cheese fries"),
    ("mac", "mac & cheese"),
    ("slaw", "slaw"),
]
UPSELL_DESSERT = ("toffee", "toffee cake for dessert")


def build_upsell_offer(item_names: Iterable[str]) -> str:
    """
    Offer the tracked sides and dessert the caller has not ordered.

    Returns an empty string when everything tracked is already in the cart.
    """
    names = [(name or "").lower() for name in item_names]

    def present(marker: str) -> bool:
        return any(marker in name for name in names)

    sides = [phrase for marker, phrase in UPSELL_SIDES if not present(marker)]
    wants_dessert = not present(UPSELL_DESSERT[0])

    if not sides:
        if wants_dessert:
            return f"{UPSELL_PREFIX}{UPSELL_DESSERT[1]}?"
        return ""

    if len(sides) == 1:
        offer = sides[0]
    else:
        offer = ", ".join(sides[:-1]) + ", or " + sides[-1]

    dessert = f", we also have {UPSELL_DESSERT[1]}" if wants_dessert else ""
    return f"{UPSELL_PREFIX}{offer}{dessert}?"
