"""Speech rendering of carts and upsell offers."""

from decimal import Decimal

from voice_cart.services.cart.models import AppliedModifier, CartLineItem
from voice_cart.services.cart.speech import (
    EMPTY_CART_SPEECH,
    build_upsell_offer,
    describe_modifiers,
    modifier_to_speech,
    render_cart,
    spoken_item_name,
)


def _line(name: str, quantity: int = 1, price: str = "2.99", **kwargs) -> CartLineItem:
    item = CartLineItem(
        variation_id=f"VAR_{name}",
        item_name=name,
        unit_price_dollars=Decimal(price),
        quantity=quantity,
        **kwargs,
    )
    item.recompute_total()
    return item


def _mod(name: str, price: str = "0") -> AppliedModifier:
    return AppliedModifier(
        category="Mods",
        option_id=name.upper().replace(" ", "_"),
        option_name=name,
        price_dollars=Decimal(price),
    )


class TestModifierPhrases:
    def test_known_phrases(self):
        assert modifier_to_speech("Extra Hot") == "extra hot"
        assert modifier_to_speech("Chicken & Bun Only") == "chicken and bun only"

    def test_piece_fragments(self):
        assert modifier_to_speech("Add cheese 2") == "with cheese"
        assert modifier_to_speech("No Big Bird Sauce 1") == "no sauce"

    def test_fallback_lowercases_and_drops_trailing_digits(self):
        assert modifier_to_speech("Extra Ranch 2") == "extra ranch"

    def test_grouped_by_piece(self):
        clause = describe_modifiers([_mod("Add cheese 1"), _mod("No Pickles 2"), _mod("Hot")])
        assert clause == " - first sandwich with cheese, second sandwich no pickles, hot"

    def test_no_modifiers(self):
        assert describe_modifiers([]) == ""


class TestItemNames:
    def test_piece_count_spoken(self):
        assert spoken_item_name(_line("Spicy Sandwich (2pc)")) == "Spicy Sandwich (2 piece)"

    def test_soda_uses_flavour(self):
        assert spoken_item_name(_line("SODA", special_instructions="Sprite")) == "Sprite"
        assert spoken_item_name(_line("SODA")) == "SODA"


class TestRenderCart:
    def test_empty(self):
        assert render_cart([], Decimal(0)) == EMPTY_CART_SPEECH

    def test_items_and_total(self):
        items = [_line("Fries", 2), _line("Chicken Sandwich", 1, "8.99", modifiers=[_mod("Hot")])]
        speech = render_cart(items, Decimal("14.97"))
        assert speech == "2 Fries, 1 Chicken Sandwich - hot. Your total is $14.97 plus tax"

    def test_total_always_two_decimals(self):
        assert render_cart([_line("Fries")], Decimal("3")).endswith("$3.00 plus tax")


class TestUpsell:
    def test_empty_cart_offers_everything(self):
        assert build_upsell_offer([]) == (
            "Before I confirm, would you like to add regular fries, cheese fries, "
            "mac & cheese, or slaw, we also have toffee cake for dessert?"
        )

    def test_only_missing_sides_offered(self):
        assert build_upsell_offer(["Seasoned Fries", "Cole Slaw"]) == (
            "Before I confirm, would you like to add mac & cheese, "
            "we also have toffee cake for dessert?"
        )

    def test_two_missing_sides(self):
        assert build_upsell_offer(["Fries", "Toffee Cake"]) == (
            "Before I confirm, would you like to add mac & cheese, or slaw?"
        )

    def test_dessert_only(self):
        assert build_upsell_offer(["Fries", "Mac & Cheese", "Slaw"]) == (
            "Before I confirm, would you like to add toffee cake for dessert?"
        )

    def test_nothing_left_to_offer(self):
        assert build_upsell_offer(["Cheese Fries", "Mac & Cheese", "Slaw", "Toffee Cake"]) == ""
