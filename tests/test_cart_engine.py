"""Cart engine operations against the in-memory store and test menu."""

import asyncio
from decimal import Decimal

import pytest

from voice_cart.core.errors import (
    CartConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from voice_cart.services.cart.engine import CartEngine
from voice_cart.services.cart.models import (
    FIRST_PIECE_CATEGORY,
    SECOND_PIECE_CATEGORY,
    CartLineItem,
)
from voice_cart.services.cart.speech import EMPTY_CART_SPEECH
from voice_cart.services.cart_store.memory import InMemoryCartStore

from tests.conftest import CALL_ID, RESTAURANT

SANDWICH_2PC = "Spicy Sandwich (2pc)"


# =============================================================================
# ADD ITEM
# =============================================================================

class TestAddItem:
    async def test_subtotal_is_price_times_quantity(self, engine):
        await engine.add_item(CALL_ID, RESTAURANT, "Mac & Cheese", quantity=4)

        summary = await engine.summarize(CALL_ID)
        assert summary.subtotal_dollars == Decimal("15.96")
        assert summary.item_count == 4

    async def test_identical_adds_merge(self, engine, store):
        first = await engine.add_item(CALL_ID, RESTAURANT, "Fries", quantity=1)
        second = await engine.add_item(CALL_ID, RESTAURANT, "Fries", quantity=2)

        assert first.merged is False
        assert second.merged is True

        cart = await store.get(CALL_ID)
        assert len(cart) == 1
        assert cart[0].quantity == 3
        assert cart[0].line_total_dollars == Decimal("8.97")

    async def test_different_instructions_do_not_merge(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, "SODA", special_instructions="Sprite")
        await engine.add_item(CALL_ID, RESTAURANT, "SODA", special_instructions="Coke")

        cart = await store.get(CALL_ID)
        assert [item.special_instructions for item in cart] == ["Sprite", "Coke"]

    async def test_bundled_item_with_two_spice_levels(self, engine, store):
        result = await engine.add_item(
            CALL_ID, RESTAURANT, SANDWICH_2PC, 1, "", "Mild", "Hot"
        )

        assert result.skipped_modifiers == []
        cart = await store.get(CALL_ID)
        assert len(cart) == 1
        line = cart[0]
        assert line.line_total_dollars == Decimal("8.99")
        assert [(m.category, m.option_name) for m in line.modifiers] == [
            (FIRST_PIECE_CATEGORY, "Mild"),
            (SECOND_PIECE_CATEGORY, "Hot"),
        ]

    async def test_spice_order_matters_for_merge(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, SANDWICH_2PC, 1, "", "Mild", "Hot")
        await engine.add_item(CALL_ID, RESTAURANT, SANDWICH_2PC, 1, "", "Hot", "Mild")
        await engine.add_item(CALL_ID, RESTAURANT, SANDWICH_2PC, 2, "", "Mild", "Hot")

        cart = await store.get(CALL_ID)
        assert [item.quantity for item in cart] == [3, 1]

    async def test_second_spice_on_single_item_is_skipped(self, engine):
        result = await engine.add_item(
            CALL_ID, RESTAURANT, "Chicken Sandwich", 1, "", "hot", "Mild"
        )

        assert result.skipped_modifiers == ["Mild (second piece - not applicable)"]
        assert [m.option_name for m in result.line_item.modifiers] == ["Hot"]

    async def test_unknown_spice_is_skipped_not_fatal(self, engine):
        result = await engine.add_item(
            CALL_ID, RESTAURANT, SANDWICH_2PC, 1, "", "Volcanic", "Hot"
        )

        assert result.skipped_modifiers == ["Volcanic (first piece)"]
        assert [m.option_name for m in result.line_item.modifiers] == ["Hot"]

    async def test_unknown_item(self, engine, store):
        with pytest.raises(NotFoundError) as exc_info:
            await engine.add_item(CALL_ID, RESTAURANT, "Pizza")

        assert "Fries" in exc_info.value.details["availableItems"]
        assert await store.get(CALL_ID) == []

    @pytest.mark.parametrize("quantity", [0, -2, True, 1.5, "2"])
    async def test_invalid_quantity(self, engine, quantity):
        with pytest.raises(ValidationError):
            await engine.add_item(CALL_ID, RESTAURANT, "Fries", quantity=quantity)

    async def test_missing_session_or_name(self, engine):
        with pytest.raises(ValidationError):
            await engine.add_item("", RESTAURANT, "Fries")
        with pytest.raises(ValidationError):
            await engine.add_item(CALL_ID, RESTAURANT, "  ")

    async def test_carts_are_isolated_per_session(self, engine, store):
        await engine.add_item("call_a", RESTAURANT, "Fries")
        await engine.add_item("call_b", RESTAURANT, "SODA")

        assert [i.item_name for i in await store.get("call_a")] == ["Fries"]
        assert [i.item_name for i in await store.get("call_b")] == ["SODA"]


# =============================================================================
# REMOVE ITEM
# =============================================================================

class TestRemoveItem:
    async def test_full_removal_then_not_found(self, engine):
        await engine.add_item(CALL_ID, RESTAURANT, "Fries", quantity=2)
        await engine.add_item(CALL_ID, RESTAURANT, "SODA")

        result = await engine.remove_item(CALL_ID, "Fries", 2)
        assert result.removed_quantity == 2
        assert result.remaining_quantity == 0

        with pytest.raises(NotFoundError) as exc_info:
            await engine.remove_item(CALL_ID, "Fries", 2)
        assert exc_info.value.details["currentItems"] == ["SODA"]

    async def test_partial_removal_recomputes_total(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, "Chicken Sandwich", 3)
        await engine.add_modifiers(CALL_ID, RESTAURANT, "Chicken Sandwich", ["Add cheese"], [])

        result = await engine.remove_item(CALL_ID, "chicken sandwich", 1)

        assert result.remaining_quantity == 2
        cart = await store.get(CALL_ID)
        assert cart[0].line_total_dollars == Decimal("19.98")

    async def test_fuzzy_match_both_directions(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, "Mac & Cheese")
        await engine.add_item(CALL_ID, RESTAURANT, "Fries")

        await engine.remove_item(CALL_ID, "mac")
        await engine.remove_item(CALL_ID, "large fries please")

        assert await store.get(CALL_ID) == []

    async def test_quantity_above_current_removes_line(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, "Fries", quantity=2)

        result = await engine.remove_item(CALL_ID, "Fries", 5)

        assert result.removed_quantity == 2
        assert await store.get(CALL_ID) == []

    async def test_empty_cart(self, engine):
        with pytest.raises(ValidationError):
            await engine.remove_item(CALL_ID, "Fries")

    async def test_invalid_quantity(self, engine):
        await engine.add_item(CALL_ID, RESTAURANT, "Fries")
        with pytest.raises(ValidationError):
            await engine.remove_item(CALL_ID, "Fries", 0)


# =============================================================================
# MODIFIERS
# =============================================================================

class TestModifiers:
    async def test_add_then_remove_round_trip(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, SANDWICH_2PC, 2, "", "Mild", "Hot")
        before = (await store.get(CALL_ID))[0]

        added = await engine.add_modifiers(
            CALL_ID, RESTAURANT, SANDWICH_2PC, ["Add cheese 1", "No Pickles 1"], ["Add cheese 2"]
        )
        assert [m.option_name for m in added.added] == ["Add cheese 1", "No Pickles 1", "Add cheese 2"]
        assert added.line_item.line_total_dollars == Decimal("21.98")

        await engine.remove_modifiers(
            CALL_ID, SANDWICH_2PC, ["Add cheese 1", "No Pickles 1"], ["Add cheese 2"]
        )

        after = (await store.get(CALL_ID))[0]
        assert after.modifiers == before.modifiers
        assert after.line_total_dollars == before.line_total_dollars

    async def test_add_to_missing_item_leaves_cart_unchanged(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, "Fries")
        before = await store.load(CALL_ID)

        with pytest.raises(NotFoundError):
            await engine.add_modifiers(CALL_ID, RESTAURANT, "Chicken Sandwich", ["Add cheese"], [])

        after = await store.load(CALL_ID)
        assert after == before

    async def test_targets_most_recent_line(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, "Chicken Sandwich", 1, "", "Mild")
        await engine.add_item(CALL_ID, RESTAURANT, "Chicken Sandwich", 1, "", "Hot")

        await engine.add_modifiers(CALL_ID, RESTAURANT, "Chicken Sandwich", ["Add tender"], [])

        cart = await store.get(CALL_ID)
        assert not cart[0].has_option("ADD_TENDER")
        assert cart[1].has_option("ADD_TENDER")
        assert cart[1].line_total_dollars == Decimal("12.49")

    async def test_already_applied_is_skipped(self, engine):
        await engine.add_item(CALL_ID, RESTAURANT, "Chicken Sandwich")
        await engine.add_modifiers(CALL_ID, RESTAURANT, "Chicken Sandwich", ["Add cheese"], [])

        result = await engine.add_modifiers(
            CALL_ID, RESTAURANT, "Chicken Sandwich", ["Add cheese", "Pickles on the side"], []
        )

        assert result.skipped == ["Add cheese"]
        assert [m.option_name for m in result.added] == ["Pickles on the side"]
        assert result.message == 'Added "Pickles on the side" to Chicken Sandwich'

    async def test_failures_are_reported(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, "Chicken Sandwich")
        before = await store.load(CALL_ID)

        result = await engine.add_modifiers(
            CALL_ID, RESTAURANT, "Chicken Sandwich", ["Extra napkins"], ["Add cheese"]
        )

        assert result.added == []
        assert result.failed == [
            "Extra napkins (first piece)",
            "Add cheese (second piece - not applicable)",
        ]
        assert await store.load(CALL_ID) == before

    async def test_requires_at_least_one_modifier(self, engine):
        with pytest.raises(ValidationError):
            await engine.add_modifiers(CALL_ID, RESTAURANT, "Chicken Sandwich", [], None)
        with pytest.raises(ValidationError):
            await engine.remove_modifiers(CALL_ID, "Chicken Sandwich", ["  "], [])

    async def test_remove_respects_piece_scope(self, engine, store):
        await engine.add_item(CALL_ID, RESTAURANT, SANDWICH_2PC, 1, "", "Mild", "Hot")

        result = await engine.remove_modifiers(CALL_ID, SANDWICH_2PC, ["Hot"], [])

        assert result.removed == []
        assert result.failed == ["Hot (first piece)"]
        cart = await store.get(CALL_ID)
        assert [m.option_name for m in cart[0].modifiers] == ["Mild", "Hot"]

        await engine.remove_modifiers(CALL_ID, SANDWICH_2PC, [], ["Hot"])
        cart = await store.get(CALL_ID)
        assert [m.option_name for m in cart[0].modifiers] == ["Mild"]

    async def test_remove_from_missing_item(self, engine):
        with pytest.raises(NotFoundError):
            await engine.remove_modifiers(CALL_ID, "Chicken Sandwich", ["Add cheese"], [])


# =============================================================================
# READ-ONLY
# =============================================================================

class TestSummaryAndUpsell:
    async def test_empty_cart_summary(self, engine):
        summary = await engine.summarize(CALL_ID)

        assert summary.speech_summary == EMPTY_CART_SPEECH
        assert summary.subtotal_dollars == Decimal(0)
        assert summary.item_count == 0
        assert summary.is_empty

    async def test_summary_speech(self, engine):
        await engine.add_item(CALL_ID, RESTAURANT, SANDWICH_2PC, 1, "", "Mild", "Hot")
        await engine.add_modifiers(CALL_ID, RESTAURANT, SANDWICH_2PC, ["Add cheese 1"], [])
        await engine.add_item(CALL_ID, RESTAURANT, "Fries", 2)

        summary = await engine.summarize(CALL_ID)

        assert summary.subtotal_dollars == Decimal("15.97")
        assert summary.item_count == 3
        assert summary.speech_summary == (
            "1 Spicy Sandwich (2 piece) - first sandwich with cheese, mild, hot, "
            "2 Fries. Your total is $15.97 plus tax"
        )

    async def test_upsell_reflects_cart(self, engine):
        await engine.add_item(CALL_ID, RESTAURANT, "Fries")
        await engine.add_item(CALL_ID, RESTAURANT, "Mac & Cheese")

        assert await engine.upsell_suggestions(CALL_ID) == (
            "Before I confirm, would you like to add slaw, "
            "we also have toffee cake for dessert?"
        )


# =============================================================================
# CONCURRENCY
# =============================================================================

class InterleavingStore(InMemoryCartStore):
    """Lets another writer sneak in before the first conditional write."""

    def __init__(self, intruder: CartLineItem):
        super().__init__()
        self.intruder = intruder
        self.put_calls = 0

    async def put(self, session_id, items, ttl_seconds, expected_version=None):
        self.put_calls += 1
        if self.put_calls == 1:
            snapshot = await self.load(session_id)
            await super().put(session_id, snapshot.items + [self.intruder], ttl_seconds)
        return await super().put(session_id, items, ttl_seconds, expected_version)


class AlwaysConflictingStore(InMemoryCartStore):
    async def put(self, session_id, items, ttl_seconds, expected_version=None):
        raise CartConflictError(session_id, expected_version or 0, (expected_version or 0) + 1)


class TestConcurrency:
    async def test_stale_write_is_replayed(self, catalog):
        intruder = CartLineItem(
            variation_id="VAR_SODA",
            item_name="SODA",
            unit_price_dollars=Decimal("2.49"),
            quantity=1,
            line_total_dollars=Decimal("2.49"),
        )
        store = InterleavingStore(intruder)
        engine = CartEngine(store, catalog, ttl_seconds=60, write_retries=3)

        await engine.add_item(CALL_ID, RESTAURANT, "Fries")

        cart = await store.get(CALL_ID)
        assert sorted(item.item_name for item in cart) == ["Fries", "SODA"]
        assert store.put_calls == 2

    async def test_gives_up_after_retries(self, catalog):
        engine = CartEngine(AlwaysConflictingStore(), catalog, ttl_seconds=60, write_retries=2)

        with pytest.raises(InternalError) as exc_info:
            await engine.add_item(CALL_ID, RESTAURANT, "Fries")
        assert exc_info.value.details["attempts"] == 2

    async def test_parallel_adds_are_not_lost(self, engine, store):
        await asyncio.gather(
            *(engine.add_item(CALL_ID, RESTAURANT, "Fries") for _ in range(10))
        )

        cart = await store.get(CALL_ID)
        assert len(cart) == 1
        assert cart[0].quantity == 10
