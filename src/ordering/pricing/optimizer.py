"""Cart pricing: derived (server-computed) and trusted (client-optimized) modes.

Derived mode runs combo matching and expansion, then spreads each combo's
price over the units it covers so that every order line carries the price
actually charged. Trusted mode accepts the total produced by the storefront's
whole-cart optimizer, but only after checking its products and list prices
against the catalogue.
"""

from collections import Counter
from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from protean.exceptions import ValidationError

from ordering.catalogue.port import CatalogLookup, ComboCatalog
from ordering.pricing.expander import expand_combo_items
from ordering.pricing.matcher import detect_and_apply_best_combo
from ordering.pricing.model import (
    AggregateComboInfo,
    CartItem,
    ComboDefinition,
    ExpandedItem,
    OrderLine,
    PricingResult,
    ProductRecord,
    SingleComboInfo,
)

logger = structlog.get_logger(__name__)

DERIVED = "derived"
TRUSTED = "trusted"


def allocate_combo_price(combo: ComboDefinition, prices: Mapping[str, int]) -> dict[str, list[tuple[int, int]]]:
    """Split one combo instance's price over its units, in whole currency units.

    Each unit gets its list-price share of ``combo_price`` rounded down, and
    the remainder goes one unit at a time to the largest fractional parts
    (earlier units first on ties). Returns ``{product_id: [(unit_price, units)]}``
    with the per-product groups in first-seen order; the grand sum is exactly
    ``combo_price``.
    """
    units = [
        (product_id, prices[product_id])
        for product_id, required in combo.required_product_counts.items()
        for _ in range(required)
    ]
    original = sum(price for _, price in units)

    if original == 0:
        base, extra = divmod(combo.combo_price, len(units))
        shares = [base + (1 if index < extra else 0) for index in range(len(units))]
    else:
        shares = [combo.combo_price * price // original for _, price in units]
        remainders = [combo.combo_price * price % original for _, price in units]
        leftover = combo.combo_price - sum(shares)
        by_remainder = sorted(range(len(units)), key=lambda index: (-remainders[index], index))
        for index in by_remainder[:leftover]:
            shares[index] += 1

    allocation: dict[str, Counter] = {}
    for (product_id, _), share in zip(units, shares, strict=True):
        allocation.setdefault(product_id, Counter())[share] += 1
    return {product_id: list(counter.items()) for product_id, counter in allocation.items()}


def _as_amount(value: Any, field: str) -> int:
    """Coerce a client-supplied money amount to an integer, rejecting fractions."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError({"optimal_pricing": [f"{field} must be a number"]})
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError({"optimal_pricing": [f"{field} must be a whole amount"]})
        value = int(value)
    return value


class PriceOptimizer:
    """Prices carts against a catalogue and a combo snapshot."""

    def __init__(self, catalog: CatalogLookup, combos: ComboCatalog):
        self.catalog = catalog
        self.combos = combos

    # -------------------------------------------------------------------
    # Mode selection
    # -------------------------------------------------------------------
    def price(
        self,
        cart_items: Sequence[CartItem],
        use_optimal_pricing: bool = False,
        optimal_pricing: Mapping[str, Any] | None = None,
    ) -> PricingResult:
        if not cart_items:
            raise ValidationError({"items": ["The cart is empty"]})
        if use_optimal_pricing and optimal_pricing:
            return self.price_trusted(cart_items, optimal_pricing)
        return self.price_cart(cart_items)

    # -------------------------------------------------------------------
    # Derived mode
    # -------------------------------------------------------------------
    def price_cart(self, cart_items: Sequence[CartItem]) -> PricingResult:
        """Match the best combo against a raw cart, then price the result."""
        combos = self.combos.active_combos()
        wanted = {item.product_id for item in cart_items if not item.is_combo}
        for combo in combos:
            wanted.update(combo.required_product_counts)
        prices = {product.id: product.price for product in self.catalog.find_many(wanted)}

        match = detect_and_apply_best_combo(cart_items, combos, prices)
        return self.quote(match.final_items)

    def quote(self, final_items: Sequence[CartItem]) -> PricingResult:
        """Price items as they stand, combo items included. Does not search for new combos."""
        if not final_items:
            raise ValidationError({"items": ["The cart is empty"]})

        combos = {combo.id: combo for combo in self.combos.active_combos()}
        expanded = expand_combo_items(final_items, combos)
        products = self._validated_products(expanded)
        prices = {product_id: product.price for product_id, product in products.items()}

        # A combo that is not cheaper than its parts is charged at list price
        allocations = {
            item.combo_id: allocate_combo_price(combos[item.combo_id], prices)
            for item in final_items
            if item.is_combo and combos[item.combo_id].combo_price < combos[item.combo_id].constituent_total(prices)
        }

        lines = []
        for item in expanded:
            product = products[item.product_id]
            if not item.from_combo or item.combo_id not in allocations:
                lines.append(self._line(product, product.price, item.quantity, item))
                continue
            instances = item.quantity // combos[item.combo_id].required_product_counts[item.product_id]
            for unit_price, units in allocations[item.combo_id][item.product_id]:
                lines.append(self._line(product, unit_price, units * instances, item))

        total_amount = sum(line.amount for line in lines)
        original_total = sum(line.list_price * line.quantity for line in lines)
        combo_info = self._derived_combo_info(final_items, combos, allocations, prices, original_total, total_amount)

        return PricingResult(
            mode=DERIVED,
            lines=tuple(lines),
            total_amount=total_amount,
            original_total=original_total,
            combo_info=combo_info,
        )

    def _derived_combo_info(self, final_items, combos, allocations, prices, original_total, total_amount):
        applied = Counter()
        for item in final_items:
            if item.is_combo and item.combo_id in allocations:
                applied[item.combo_id] += item.quantity

        savings_by_combo = {
            combo_id: (combos[combo_id].constituent_total(prices) - combos[combo_id].combo_price) * count
            for combo_id, count in applied.items()
        }
        savings = original_total - total_amount
        if savings <= 0:
            return None

        if len(applied) == 1:
            combo_id, count = next(iter(applied.items()))
            combo = combos[combo_id]
            return SingleComboInfo(
                combo_id=combo.id,
                combo_name=combo.name,
                savings=savings,
                message=f"Applied combo {combo.name} x{count}, saving {savings}",
            )

        return AggregateComboInfo(
            savings=savings,
            original_total=original_total,
            final_total=total_amount,
            combos=[
                {"comboId": combo_id, "comboName": combos[combo_id].name, "quantity": count}
                for combo_id, count in applied.items()
            ],
            breakdown=[
                {"comboId": combo_id, "savings": combo_savings} for combo_id, combo_savings in savings_by_combo.items()
            ],
        )

    # -------------------------------------------------------------------
    # Trusted mode
    # -------------------------------------------------------------------
    def price_trusted(self, cart_items: Sequence[CartItem], optimal_pricing: Mapping[str, Any]) -> PricingResult:
        """Accept a client-optimized total after checking it against the catalogue.

        Line prices always come from the catalogue. The payload's original
        total must match the catalogue total for the same items; a mismatch
        means the client priced the cart with stale prices and is rejected.
        """
        summary = optimal_pricing.get("summary")
        if not isinstance(summary, Mapping):
            raise ValidationError({"optimal_pricing": ["Pricing summary is missing"]})

        combos = {combo.id: combo for combo in self.combos.active_combos()}
        expanded = expand_combo_items(cart_items, combos)
        products = self._validated_products(expanded)

        lines = tuple(
            self._line(products[item.product_id], products[item.product_id].price, item.quantity, item)
            for item in expanded
        )
        catalogue_total = sum(line.amount for line in lines)

        original_total = _as_amount(summary.get("originalTotal"), "originalTotal")
        final_total = _as_amount(summary.get("finalTotal"), "finalTotal")
        savings = summary.get("totalSavings")
        savings = original_total - final_total if savings is None else _as_amount(savings, "totalSavings")

        if original_total != catalogue_total:
            logger.warning(
                "trusted_pricing_stale",
                client_original_total=original_total,
                catalogue_total=catalogue_total,
            )
            raise ValidationError({"optimal_pricing": ["Prices have changed, please refresh your cart"]})
        if final_total < 0 or final_total > original_total:
            raise ValidationError({"optimal_pricing": ["Final total must be between zero and the original total"]})
        if savings != original_total - final_total:
            raise ValidationError(
                {"optimal_pricing": ["Savings must equal the difference between original and final totals"]}
            )

        combo_info = None
        if savings > 0:
            combo_info = AggregateComboInfo(
                savings=savings,
                original_total=original_total,
                final_total=final_total,
                combos=list(optimal_pricing.get("combos") or []),
                breakdown=list(optimal_pricing.get("breakdown") or []),
            )

        return PricingResult(
            mode=TRUSTED,
            lines=lines,
            total_amount=final_total,
            original_total=original_total,
            discount_total=original_total - final_total,
            combo_info=combo_info,
        )

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _validated_products(self, expanded: Sequence[ExpandedItem]) -> dict[str, ProductRecord]:
        """Look up every referenced product; all must exist and be available."""
        product_ids = list(dict.fromkeys(item.product_id for item in expanded))
        products = {product.id: product for product in self.catalog.find_many(product_ids, available_only=True)}
        missing = [product_id for product_id in product_ids if product_id not in products]
        if missing:
            logger.warning("catalogue_validation_failed", requested=len(product_ids), missing=missing)
            raise ValidationError({"items": ["One or more products do not exist or are not available"]})
        return products

    @staticmethod
    def _line(product: ProductRecord, unit_price: int, quantity: int, item: ExpandedItem) -> OrderLine:
        return OrderLine(
            product_id=product.id,
            product_name=product.name,
            unit_price=unit_price,
            list_price=product.price,
            quantity=quantity,
            from_combo=item.from_combo,
            combo_id=item.combo_id,
            combo_name=item.combo_name,
        )
