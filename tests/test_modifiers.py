"""Modifier resolution against menu definitions."""

from decimal import Decimal

from voice_cart.services.cart.models import FIRST_PIECE_CATEGORY, SECOND_PIECE_CATEGORY
from voice_cart.services.cart.modifiers import PieceScope, find_modifier, find_spice_level


class TestFindModifier:
    def test_bundled_item_uses_piece_category(self, sandwich_2pc):
        first = find_modifier(sandwich_2pc, "Add cheese 1", PieceScope.FIRST_PIECE)
        assert first.category == FIRST_PIECE_CATEGORY
        assert first.option_id == "P1_CHEESE"
        assert first.price_dollars == Decimal("1.00")

    def test_bundled_item_does_not_cross_pieces(self, sandwich_2pc):
        assert find_modifier(sandwich_2pc, "Add cheese 1", PieceScope.SECOND_PIECE) is None

    def test_same_name_resolves_per_piece(self, sandwich_2pc):
        first = find_modifier(sandwich_2pc, "Hot", PieceScope.FIRST_PIECE)
        second = find_modifier(sandwich_2pc, "Hot", PieceScope.SECOND_PIECE)
        assert first.option_id == "P1_HOT"
        assert second.option_id == "P2_HOT"
        assert second.category == SECOND_PIECE_CATEGORY

    def test_single_item_searches_all_categories(self, chicken_sandwich):
        modifier = find_modifier(chicken_sandwich, "Add tender")
        assert modifier.category == "Sandwich Mods"
        assert modifier.price_dollars == Decimal("3.50")

    def test_scope_ignored_for_single_item(self, chicken_sandwich):
        modifier = find_modifier(chicken_sandwich, "Add cheese", PieceScope.SECOND_PIECE)
        assert modifier.option_id == "ADD_CHEESE"

    def test_name_is_trimmed_but_case_sensitive(self, chicken_sandwich):
        assert find_modifier(chicken_sandwich, "  Add cheese ").option_id == "ADD_CHEESE"
        assert find_modifier(chicken_sandwich, "add cheese") is None

    def test_unknown_or_blank_name(self, chicken_sandwich):
        assert find_modifier(chicken_sandwich, "Extra napkins") is None
        assert find_modifier(chicken_sandwich, "   ") is None


class TestFindSpiceLevel:
    def test_case_insensitive(self, chicken_sandwich):
        modifier = find_spice_level(chicken_sandwich, "  hOt ")
        assert modifier.option_name == "Hot"
        assert modifier.category == "Choose Spice Level"

    def test_bundled_second_piece(self, sandwich_2pc):
        modifier = find_spice_level(sandwich_2pc, "mild", PieceScope.SECOND_PIECE)
        assert modifier.option_id == "P2_MILD"

    def test_item_without_spice_category(self, fries):
        assert find_spice_level(fries, "Hot") is None

    def test_unknown_level(self, chicken_sandwich):
        assert find_spice_level(chicken_sandwich, "Volcanic") is None
        assert find_spice_level(chicken_sandwich, None) is None
