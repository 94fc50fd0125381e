"""
Session Cart Engine

Owns every mutation of a call's shopping cart:

    - add_item: add a menu item (with optional spice levels), merging with an
      identical line already in the cart
    - add_modifiers / remove_modifiers: change modifiers on the most recently
      added line with a given name
    - remove_item: drop or decrement a line (fuzzy name match)
    - summarize / upsell_suggestions: read-only speech output

Each mutation is computed completely in memory against a freshly loaded
snapshot and written back with a single `put()` carrying the snapshot
version. If another request wrote the cart in between, the store refuses
the write and the mutation is replayed on the new contents.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from decimal import Decimal
from typing import Callable, Optional, TypeVar

from voice_cart.core.config import get_settings
from voice_cart.core.errors import (
    CartConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from voice_cart.services.cart.models import (
    AddItemResult,
    AppliedModifier,
    CartLineItem,
    CartSummary,
    MenuItem,
    ModifierChangeResult,
    RemoveItemResult,
    RestaurantKey,
    is_bundled_item,
)
from voice_cart.services.cart.modifiers import (
    PieceScope,
    category_for_scope,
    find_modifier,
    find_spice_level,
)
from voice_cart.services.cart.speech import (
    EMPTY_CART_SPEECH,
    build_upsell_offer,
    render_cart,
)
from voice_cart.services.cart_store.base import BaseCartStore
from voice_cart.services.menu.base import BaseMenuCatalog

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (result, cart_changed)
Mutation = Callable[[list[CartLineItem]], tuple[T, bool]]


def _require_session(session_id: str) -> str:
    if not session_id or not str(session_id).strip():
        raise ValidationError("Missing call ID in request")
    return str(session_id).strip()


def _require_item_name(item_name: str) -> str:
    if not item_name or not str(item_name).strip():
        raise ValidationError("Missing required field: itemName")
    return str(item_name).strip()


def _require_positive_int(value, field: str) -> int:
    # bool is an int subclass; True must not count as quantity 1
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field} must be a positive integer", {"received": repr(value)})
    return value


def _clean_names(names: Optional[list[str]]) -> list[str]:
    return [n.strip() for n in names or [] if n and n.strip()]


def _change_message(verb: str, preposition: str, names: list[str], total: int, item_name: str) -> str:
    if len(names) == 1:
        return f'{verb} "{names[0]}" {preposition} {item_name}'
    if len(names) == total:
        return f"{verb} {len(names)} modifiers {preposition} {item_name}: {', '.join(names)}"
    return f"{verb} {len(names)} of {total} modifiers {preposition} {item_name}: {', '.join(names)}"


class CartEngine:
    """
    Cart operations for one process.

    Args:
        store: Session cart persistence
        menu_catalog: Read-only menu source
        ttl_seconds: Cart lifetime after each write (default from settings)
        write_retries: Attempts per mutation when versions conflict
    """

    def __init__(
        self,
        store: BaseCartStore,
        menu_catalog: BaseMenuCatalog,
        ttl_seconds: Optional[int] = None,
        write_retries: Optional[int] = None,
    ):
        settings = get_settings()
        self.store = store
        self.menu_catalog = menu_catalog
        self.ttl_seconds = ttl_seconds or settings.session_cart_ttl_seconds
        self.write_retries = write_retries or settings.cart_write_retries

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _mutate(self, session_id: str, mutation: Mutation) -> T:
        """Run read → mutate → conditional write, replaying on conflicts."""
        for attempt in range(1, self.write_retries + 1):
            snapshot = await self.store.load(session_id)
            result, changed = mutation(snapshot.items)

            if not changed:
                return result

            try:
                await self.store.put(
                    session_id,
                    snapshot.items,
                    self.ttl_seconds,
                    expected_version=snapshot.version,
                )
                return result
            except CartConflictError as e:
                logger.warning(
                    f"Cart conflict for {session_id} "
                    f"(attempt {attempt}/{self.write_retries}): {e.details}"
                )

        raise InternalError(
            "Cart is being modified by another request, please try again",
            {"session_id": session_id, "attempts": self.write_retries},
        )

    async def _menu_item(self, restaurant: RestaurantKey, item_name: str) -> MenuItem:
        menu = await self.menu_catalog.get_menu(restaurant)
        return self._lookup_menu_item(menu, restaurant, item_name)

    @staticmethod
    def _lookup_menu_item(
        menu: dict[str, MenuItem],
        restaurant: RestaurantKey,
        item_name: str,
    ) -> MenuItem:
        menu_item = menu.get(item_name)
        if menu_item is None:
            raise NotFoundError(
                f'Item "{item_name}" not found in {restaurant} menu',
                {"availableItems": sorted(menu.keys())},
            )
        return menu_item

    @staticmethod
    def _latest_index(cart: list[CartLineItem], item_name: str) -> int:
        """Most recently added line with exactly this name."""
        for index in range(len(cart) - 1, -1, -1):
            if cart[index].item_name == item_name:
                return index
        raise NotFoundError(f'No "{item_name}" found in cart to modify. Add the item first.')

    @staticmethod
    def _fuzzy_index(cart: list[CartLineItem], item_name: str) -> int:
        wanted = item_name.lower()
        for index, item in enumerate(cart):
            name = item.item_name.lower()
            if wanted in name or name in wanted:
                return index
        raise NotFoundError(
            f'Item "{item_name}" not found in cart',
            {"currentItems": [item.item_name for item in cart]},
        )

    # =========================================================================
    # ITEMS
    # =========================================================================

    async def add_item(
        self,
        session_id: str,
        restaurant: RestaurantKey,
        item_name: str,
        quantity: int = 1,
        special_instructions: str = "",
        first_piece_spice: Optional[str] = None,
        second_piece_spice: Optional[str] = None,
    ) -> AddItemResult:
        """
        Add a menu item to the session cart.

        Spice levels that cannot be resolved, and a second-piece spice on a
        single item, are reported in `skipped_modifiers` rather than failing.

        Raises:
            ValidationError: Bad session id, name or quantity
            NotFoundError: Item not on this location's menu
        """
        session_id = _require_session(session_id)
        item_name = _require_item_name(item_name)
        quantity = _require_positive_int(quantity, "Quantity")
        special_instructions = (special_instructions or "").strip()

        menu_item = await self._menu_item(restaurant, item_name)

        candidate = CartLineItem.from_menu_item(menu_item, quantity, special_instructions)
        skipped: list[str] = []

        if first_piece_spice:
            modifier = find_spice_level(menu_item, first_piece_spice, PieceScope.FIRST_PIECE)
            if modifier:
                candidate.modifiers.append(modifier)
                logger.info(f"Applied first item spice level: {modifier.option_name}")
            else:
                skipped.append(f"{first_piece_spice} (first piece)")
                logger.warning(f"Could not apply first item spice level: {first_piece_spice}")

        if second_piece_spice:
            if menu_item.is_bundled:
                modifier = find_spice_level(menu_item, second_piece_spice, PieceScope.SECOND_PIECE)
                if modifier:
                    candidate.modifiers.append(modifier)
                    logger.info(f"Applied second item spice level: {modifier.option_name}")
                else:
                    skipped.append(f"{second_piece_spice} (second piece)")
                    logger.warning(f"Could not apply second item spice level: {second_piece_spice}")
            else:
                skipped.append(f"{second_piece_spice} (second piece - not applicable)")
                logger.warning(f"Second item spice level ignored for single item: {item_name}")

        candidate.recompute_total()
        message = f"Added {quantity} {item_name} to cart for {restaurant}"

        def mutation(cart: list[CartLineItem]) -> tuple[AddItemResult, bool]:
            for existing in cart:
                if existing.is_mergeable_with(candidate):
                    existing.quantity += candidate.quantity
                    existing.recompute_total()
                    return AddItemResult(
                        line_item=existing.model_copy(deep=True),
                        merged=True,
                        skipped_modifiers=skipped,
                        message=message,
                    ), True

            line = candidate.model_copy(deep=True)
            cart.append(line)
            return AddItemResult(
                line_item=line.model_copy(deep=True),
                skipped_modifiers=skipped,
                message=message,
            ), True

        result = await self._mutate(session_id, mutation)
        logger.info(
            f"Item added to session cart {session_id}: {item_name} x{quantity} "
            f"(merged={result.merged})"
        )
        return result

    async def remove_item(
        self,
        session_id: str,
        item_name: str,
        quantity_to_remove: Optional[int] = None,
    ) -> RemoveItemResult:
        """
        Remove a line, or part of its quantity.

        The first line whose name contains (or is contained in) `item_name`,
        case-insensitively, is used.

        Raises:
            ValidationError: Empty cart or bad quantity
            NotFoundError: No matching line
        """
        session_id = _require_session(session_id)
        item_name = _require_item_name(item_name)
        if quantity_to_remove is not None:
            _require_positive_int(quantity_to_remove, "quantityToRemove")

        def mutation(cart: list[CartLineItem]) -> tuple[RemoveItemResult, bool]:
            if not cart:
                raise ValidationError("Cart is empty")

            index = self._fuzzy_index(cart, item_name)
            line = cart[index]
            remove_qty = quantity_to_remove or line.quantity

            if remove_qty >= line.quantity:
                del cart[index]
                return RemoveItemResult(
                    item_name=line.item_name,
                    removed_quantity=line.quantity,
                    remaining_quantity=0,
                    message=f"Removed {line.quantity} {line.item_name} from cart",
                ), True

            line.quantity -= remove_qty
            line.recompute_total()
            return RemoveItemResult(
                item_name=line.item_name,
                removed_quantity=remove_qty,
                remaining_quantity=line.quantity,
                message=f"Removed {remove_qty} {line.item_name} from cart",
            ), True

        result = await self._mutate(session_id, mutation)
        logger.info(f"Item removed from session cart {session_id}: {result.message}")
        return result

    # =========================================================================
    # MODIFIERS
    # =========================================================================

    async def add_modifiers(
        self,
        session_id: str,
        restaurant: RestaurantKey,
        item_name: str,
        first_piece_names: Optional[list[str]] = None,
        second_piece_names: Optional[list[str]] = None,
    ) -> ModifierChangeResult:
        """
        Apply modifiers to the most recent cart line named `item_name`.

        Unknown names are reported in `failed`, already-applied options in
        `skipped`. Second-piece names on a single item all fail as not
        applicable.

        Raises:
            ValidationError: Missing name or no modifiers requested
            NotFoundError: Line not in cart, or item not on the menu
        """
        session_id = _require_session(session_id)
        item_name = _require_item_name(item_name)
        first = _clean_names(first_piece_names)
        second = _clean_names(second_piece_names)
        if not first and not second:
            raise ValidationError(
                "At least one modifier (firstSandwichMods or secondSandwichMods) is required"
            )

        menu = await self.menu_catalog.get_menu(restaurant)
        total_requested = len(first) + len(second)

        def mutation(cart: list[CartLineItem]) -> tuple[ModifierChangeResult, bool]:
            index = self._latest_index(cart, item_name)
            menu_item = self._lookup_menu_item(menu, restaurant, item_name)
            line = cart[index]
            bundled = menu_item.is_bundled

            added: list[AppliedModifier] = []
            skipped: list[str] = []
            failed: list[str] = []

            def apply(name: str, scope: PieceScope, label: str) -> None:
                modifier = find_modifier(menu_item, name, scope)
                if modifier is None:
                    failed.append(f"{name} ({label})")
                elif line.has_option(modifier.option_id):
                    skipped.append(modifier.option_name)
                else:
                    line.modifiers.append(modifier)
                    added.append(modifier)

            for name in first:
                apply(name, PieceScope.FIRST_PIECE if bundled else PieceScope.WHOLE_ITEM, "first piece")

            for name in second:
                if bundled:
                    apply(name, PieceScope.SECOND_PIECE, "second piece")
                else:
                    failed.append(f"{name} (second piece - not applicable)")

            if added:
                line.recompute_total()
                message = _change_message(
                    "Added", "to", [m.option_name for m in added], total_requested, item_name
                )
            elif skipped:
                message = f"All modifiers already applied to {item_name}: {', '.join(skipped)}"
            else:
                message = f'No valid modifiers found for "{item_name}"'

            return ModifierChangeResult(
                line_item=line.model_copy(deep=True),
                added=added,
                skipped=skipped,
                failed=failed,
                message=message,
            ), bool(added)

        result = await self._mutate(session_id, mutation)
        logger.info(
            f"Modifiers on {item_name} for {session_id}: "
            f"added={len(result.added)} skipped={len(result.skipped)} failed={len(result.failed)}"
        )
        return result

    async def remove_modifiers(
        self,
        session_id: str,
        item_name: str,
        first_piece_names: Optional[list[str]] = None,
        second_piece_names: Optional[list[str]] = None,
    ) -> ModifierChangeResult:
        """
        Remove modifiers from the most recent cart line named `item_name`.

        On two-piece items each name only matches inside its own piece's
        category. Names that match nothing are reported in `failed`.

        Raises:
            ValidationError: Missing name or no modifiers requested
            NotFoundError: Line not in cart
        """
        session_id = _require_session(session_id)
        item_name = _require_item_name(item_name)
        first = _clean_names(first_piece_names)
        second = _clean_names(second_piece_names)
        if not first and not second:
            raise ValidationError(
                "At least one modifier (firstSandwichMods or secondSandwichMods) is required"
            )

        bundled = is_bundled_item(item_name)
        total_requested = len(first) + len(second)

        def mutation(cart: list[CartLineItem]) -> tuple[ModifierChangeResult, bool]:
            index = self._latest_index(cart, item_name)
            line = cart[index]

            removed: list[AppliedModifier] = []
            failed: list[str] = []

            def take(name: str, scope: PieceScope, label: str) -> None:
                category = category_for_scope(scope) if bundled else None
                for position, modifier in enumerate(line.modifiers):
                    if modifier.option_name.strip() != name:
                        continue
                    if category is not None and modifier.category != category:
                        continue
                    removed.append(line.modifiers.pop(position))
                    return
                failed.append(f"{name} ({label})")

            for name in first:
                take(name, PieceScope.FIRST_PIECE if bundled else PieceScope.WHOLE_ITEM, "first piece")

            for name in second:
                if bundled:
                    take(name, PieceScope.SECOND_PIECE, "second piece")
                else:
                    failed.append(f"{name} (second piece - not applicable)")

            if removed:
                line.recompute_total()
                message = _change_message(
                    "Removed", "from", [m.option_name for m in removed], total_requested, item_name
                )
            else:
                message = f'No specified modifiers found on "{item_name}"'

            return ModifierChangeResult(
                line_item=line.model_copy(deep=True),
                removed=removed,
                failed=failed,
                message=message,
            ), bool(removed)

        result = await self._mutate(session_id, mutation)
        logger.info(
            f"Modifiers removed from {item_name} for {session_id}: "
            f"removed={len(result.removed)} failed={len(result.failed)}"
        )
        return result

    # =========================================================================
    # READ-ONLY
    # =========================================================================

    async def get_cart(self, session_id: str) -> list[CartLineItem]:
        return await self.store.get(_require_session(session_id))

    async def summarize(self, session_id: str) -> CartSummary:
        """Subtotal, item count and the spoken cart summary."""
        items = await self.get_cart(session_id)

        if not items:
            return CartSummary(speech_summary=EMPTY_CART_SPEECH)

        subtotal = sum((item.line_total_dollars for item in items), Decimal(0))
        item_count = sum(item.quantity for item in items)

        return CartSummary(
            subtotal_dollars=subtotal,
            item_count=item_count,
            speech_summary=render_cart(items, subtotal),
            items=items,
        )

    async def upsell_suggestions(self, session_id: str) -> str:
        """Offer the tracked sides/dessert not already in the cart."""
        items = await self.get_cart(session_id)
        return build_upsell_offer(item.item_name for item in items)
