"""Combo detection: find the single combo kind that saves the customer the most.

Only one combo kind is applied per cart. Searching every mix of combo kinds
is left to the storefront's optimizer, whose result reaches us through
trusted pricing.
"""

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

import structlog

from ordering.pricing.model import CartItem, ComboDefinition

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ComboMatch:
    success: bool
    has_combo: bool
    final_items: list[CartItem] = field(default_factory=list)
    combo: ComboDefinition | None = None
    applied_count: int = 0
    savings: int | None = None
    message: str | None = None


def product_quantities(cart_items: Iterable[CartItem]) -> Counter:
    """Total units per product, ignoring client-selected combo items."""
    quantities = Counter()
    for item in cart_items:
        if not item.is_combo and item.product_id:
            quantities[item.product_id] += item.quantity
    return quantities


def satisfiable_count(combo: ComboDefinition, quantities: Mapping[str, int]) -> int:
    """How many full instances of ``combo`` the quantities can cover."""
    return min(quantities.get(product_id, 0) // required for product_id, required in combo.required_product_counts.items())


def _consume(cart_items: Sequence[CartItem], combo: ComboDefinition, count: int) -> list[CartItem]:
    """Remove ``count`` combo instances worth of units, draining items in cart order."""
    to_remove = {product_id: required * count for product_id, required in combo.required_product_counts.items()}
    leftovers = []
    for item in cart_items:
        if item.is_combo or item.product_id not in to_remove:
            leftovers.append(item)
            continue
        taken = min(item.quantity, to_remove[item.product_id])
        to_remove[item.product_id] -= taken
        if item.quantity > taken:
            leftovers.append(CartItem(product_id=item.product_id, quantity=item.quantity - taken))
    return leftovers


def _closest_combo(combos: Sequence[ComboDefinition], quantities: Mapping[str, int]) -> str | None:
    """Describe the combo with the fewest missing units, for "add X to get a combo" hints."""
    best = None
    for combo in combos:
        missing = {
            product_id: required - quantities.get(product_id, 0)
            for product_id, required in combo.required_product_counts.items()
            if quantities.get(product_id, 0) < required
        }
        if len(missing) == len(combo.required_product_counts):
            continue  # Nothing in the cart belongs to this combo
        shortfall = sum(missing.values())
        if best is None or shortfall < best[0]:
            best = (shortfall, combo, missing)

    if best is None:
        return None
    _, combo, missing = best
    needed = ", ".join(f"{quantity} x {product_id}" for product_id, quantity in missing.items())
    return f"Add {needed} to get combo {combo.name}"


def detect_and_apply_best_combo(
    cart_items: Sequence[CartItem],
    combos: Sequence[ComboDefinition],
    prices: Mapping[str, int],
    allow_partial: bool = False,
) -> ComboMatch:
    """Apply the most valuable satisfiable combo to the cart.

    Args:
        cart_items: The cart as submitted. Client-selected combo items pass through.
        combos: Active combo definitions, in definition order.
        prices: Unit price per product id. Combos with an unpriced constituent are skipped.
        allow_partial: When nothing matches, report the combo closest to completion.
    """
    quantities = product_quantities(cart_items)

    best = None
    for combo in combos:
        count = satisfiable_count(combo, quantities)
        if count == 0:
            continue
        constituent_total = combo.constituent_total(prices)
        if constituent_total is None or combo.combo_price >= constituent_total:
            continue
        savings = (constituent_total - combo.combo_price) * count
        # Strict comparison keeps the first-defined combo on ties
        if best is None or savings > best[2]:
            best = (combo, count, savings)

    if best is None:
        message = _closest_combo(combos, quantities) if allow_partial else None
        return ComboMatch(success=True, has_combo=False, final_items=list(cart_items), message=message)

    combo, count, savings = best
    combo_item = CartItem(product_id=None, quantity=count, is_combo=True, combo_id=combo.id)
    final_items = [combo_item, *_consume(cart_items, combo, count)]

    logger.debug("combo_matched", combo_id=combo.id, applied_count=count, savings=savings)

    return ComboMatch(
        success=True,
        has_combo=True,
        final_items=final_items,
        combo=combo,
        applied_count=count,
        savings=savings,
        message=f"Applied combo {combo.name} x{count}, saving {savings}",
    )
