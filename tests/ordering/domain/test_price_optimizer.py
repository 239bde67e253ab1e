"""Tests for derived and trusted cart pricing."""

import pytest
from ordering.catalogue.fake_adapter import InMemoryCatalog
from ordering.pricing.matcher import detect_and_apply_best_combo
from ordering.pricing.model import (
    AggregateComboInfo,
    CartItem,
    ComboDefinition,
    ProductRecord,
    SingleComboInfo,
)
from ordering.pricing.optimizer import DERIVED, TRUSTED, PriceOptimizer, allocate_combo_price
from protean.exceptions import ValidationError


def _optimizer(catalog):
    return PriceOptimizer(catalog, catalog)


def _cart(*pairs):
    return [CartItem(product_id=product_id, quantity=quantity) for product_id, quantity in pairs]


def _combo_item(combo_id, quantity=1):
    return CartItem(product_id=None, quantity=quantity, is_combo=True, combo_id=combo_id)


class TestAllocateComboPrice:
    def test_split_follows_list_prices(self):
        combo = ComboDefinition(id="c", name="C", required_product_counts={"tshirt": 1, "cap": 1}, combo_price=220000)
        allocation = allocate_combo_price(combo, {"tshirt": 150000, "cap": 100000})
        assert allocation == {"tshirt": [(132000, 1)], "cap": [(88000, 1)]}

    def test_identical_units_share_evenly(self):
        combo = ComboDefinition(id="c", name="C", required_product_counts={"mug": 2}, combo_price=100000)
        assert allocate_combo_price(combo, {"mug": 60000}) == {"mug": [(50000, 2)]}

    def test_remainder_goes_to_earliest_units(self):
        combo = ComboDefinition(id="c", name="C", required_product_counts={"a": 1, "b": 1, "c": 1}, combo_price=100)
        allocation = allocate_combo_price(combo, {"a": 10, "b": 10, "c": 10})
        assert allocation == {"a": [(34, 1)], "b": [(33, 1)], "c": [(33, 1)]}

    def test_free_products_split_combo_price_evenly(self):
        combo = ComboDefinition(id="c", name="C", required_product_counts={"a": 2}, combo_price=5)
        assert allocate_combo_price(combo, {"a": 0}) == {"a": [(3, 1), (2, 1)]}

    def test_shares_always_add_up_to_combo_price(self):
        combo = ComboDefinition(id="c", name="C", required_product_counts={"a": 3, "b": 2}, combo_price=99999)
        allocation = allocate_combo_price(combo, {"a": 12345, "b": 67891})
        assert sum(price * units for groups in allocation.values() for price, units in groups) == 99999


class TestDerivedPricing:
    def test_single_combo_cart(self, catalog):
        result = _optimizer(catalog).price_cart(_cart(("tshirt", 1), ("cap", 1)))
        assert result.mode == DERIVED
        assert result.total_amount == 220000
        assert result.original_total == 250000
        assert result.discount_total == 0
        assert isinstance(result.combo_info, SingleComboInfo)
        assert result.combo_info.savings == 30000
        assert result.combo_info.combo_id == "combo-shirt-cap"

    def test_combo_lines_carry_charged_and_list_prices(self, catalog):
        result = _optimizer(catalog).price_cart(_cart(("tshirt", 1), ("cap", 1)))
        prices = {line.product_id: (line.unit_price, line.list_price) for line in result.lines}
        assert prices == {"tshirt": (132000, 150000), "cap": (88000, 100000)}
        assert all(line.from_combo for line in result.lines)

    def test_double_quantity_combo_scenario(self):
        catalog = InMemoryCatalog(
            products=[ProductRecord(id="product-a", name="Product A", price=100000)],
            combos=[
                ComboDefinition(
                    id="combo-a2", name="Double A", required_product_counts={"product-a": 2}, combo_price=180000
                )
            ],
        )
        result = _optimizer(catalog).price_cart(_cart(("product-a", 2)))
        assert result.total_amount == 180000
        assert result.combo_info.savings == 20000

    def test_no_combo_total_is_sum_of_prices(self):
        catalog = InMemoryCatalog(
            products=[
                ProductRecord(id="product-a", name="Product A", price=100000),
                ProductRecord(id="product-b", name="Product B", price=45000),
            ],
        )
        result = _optimizer(catalog).price_cart(_cart(("product-a", 1), ("product-b", 1)))
        assert result.total_amount == 145000
        assert result.combo_info is None
        assert result.to_dict()["comboInfo"] is None

    def test_leftovers_are_charged_at_list_price(self, catalog):
        result = _optimizer(catalog).price_cart(_cart(("tshirt", 1), ("cap", 2)))
        assert result.total_amount == 220000 + 100000
        plain = [line for line in result.lines if not line.from_combo]
        assert [(line.product_id, line.unit_price, line.quantity) for line in plain] == [("cap", 100000, 1)]

    def test_total_equals_sum_of_lines(self, catalog):
        result = _optimizer(catalog).price_cart(_cart(("tshirt", 3), ("cap", 2), ("mug", 3)))
        assert result.total_amount == sum(line.unit_price * line.quantity for line in result.lines)

    def test_several_combo_kinds_give_aggregate_info(self, catalog):
        items = [_combo_item("combo-shirt-cap"), _combo_item("combo-two-mugs")]
        result = _optimizer(catalog).quote(items)
        assert isinstance(result.combo_info, AggregateComboInfo)
        assert result.combo_info.savings == 30000 + 20000
        assert result.combo_info.original_total == 370000
        assert result.combo_info.final_total == 320000
        assert result.combo_info.breakdown == [
            {"comboId": "combo-shirt-cap", "savings": 30000},
            {"comboId": "combo-two-mugs", "savings": 20000},
        ]

    def test_combo_dearer_than_its_parts_is_charged_at_list_price(self):
        catalog = InMemoryCatalog(
            products=[ProductRecord(id="product-a", name="Product A", price=100)],
            combos=[
                ComboDefinition(id="combo-bad", name="Bad", required_product_counts={"product-a": 1}, combo_price=500)
            ],
        )
        result = _optimizer(catalog).quote([_combo_item("combo-bad")])
        assert result.total_amount == 100
        assert result.original_total == 100
        assert [(line.product_id, line.unit_price, line.from_combo) for line in result.lines] == [
            ("product-a", 100, True)
        ]
        assert result.combo_info is None

    def test_only_the_cheaper_combo_is_discounted(self, catalog):
        catalog.add_combo(
            ComboDefinition(
                id="combo-pricey-mugs", name="Pricey Mugs", required_product_counts={"mug": 2}, combo_price=150000
            )
        )
        items = [_combo_item("combo-shirt-cap"), _combo_item("combo-pricey-mugs")]
        result = _optimizer(catalog).quote(items)
        assert result.total_amount == 220000 + 2 * 60000
        assert isinstance(result.combo_info, SingleComboInfo)
        assert result.combo_info.combo_id == "combo-shirt-cap"

    def test_quote_is_idempotent(self, catalog):
        optimizer = _optimizer(catalog)
        cart = _cart(("tshirt", 2), ("cap", 1), ("mug", 1))
        prices = {product.id: product.price for product in catalog.products.values()}
        match = detect_and_apply_best_combo(cart, catalog.active_combos(), prices)
        first = optimizer.quote(match.final_items)
        second = optimizer.quote(match.final_items)
        assert first.total_amount == second.total_amount
        assert first.combo_info == second.combo_info

    def test_unavailable_product_is_rejected(self, catalog):
        with pytest.raises(ValidationError) as exc:
            _optimizer(catalog).price_cart(_cart(("tote", 1)))
        assert "items" in exc.value.messages

    def test_unknown_product_is_rejected(self, catalog):
        with pytest.raises(ValidationError):
            _optimizer(catalog).price_cart(_cart(("tshirt", 1), ("ghost", 1)))

    def test_empty_cart_is_rejected(self, catalog):
        with pytest.raises(ValidationError):
            _optimizer(catalog).price([])


def _optimal_pricing(original, final, savings=None, combos=None):
    summary = {"originalTotal": original, "finalTotal": final}
    if savings is not None:
        summary["totalSavings"] = savings
    return {
        "summary": summary,
        "combos": combos or [],
        "breakdown": [{"comboId": "combo-shirt-cap", "savings": original - final}] if original != final else [],
    }


class TestTrustedPricing:
    def test_client_total_is_accepted(self, catalog):
        cart = _cart(("tshirt", 1), ("cap", 1))
        result = _optimizer(catalog).price(
            cart,
            use_optimal_pricing=True,
            optimal_pricing=_optimal_pricing(250000, 220000, 30000, [{"comboId": "combo-shirt-cap", "quantity": 1}]),
        )
        assert result.mode == TRUSTED
        assert result.total_amount == 220000
        assert result.discount_total == 30000
        assert result.combo_info.savings == 30000
        assert result.combo_info.combos == [{"comboId": "combo-shirt-cap", "quantity": 1}]

    def test_lines_keep_catalogue_prices(self, catalog):
        cart = _cart(("tshirt", 1), ("cap", 1))
        result = _optimizer(catalog).price_trusted(cart, _optimal_pricing(250000, 220000, 30000))
        assert [(line.product_id, line.unit_price) for line in result.lines] == [("tshirt", 150000), ("cap", 100000)]
        assert sum(line.amount for line in result.lines) - result.discount_total == result.total_amount

    def test_fractional_whole_amounts_are_accepted(self, catalog):
        cart = _cart(("tshirt", 1), ("cap", 1))
        result = _optimizer(catalog).price_trusted(cart, _optimal_pricing(250000.0, 220000.0))
        assert result.total_amount == 220000
        assert result.combo_info.savings == 30000

    def test_unknown_product_is_rejected(self, catalog):
        cart = _cart(("tshirt", 1), ("ghost", 1))
        with pytest.raises(ValidationError):
            _optimizer(catalog).price_trusted(cart, _optimal_pricing(250000, 220000))

    def test_stale_original_total_is_rejected(self, catalog):
        cart = _cart(("tshirt", 1), ("cap", 1))
        with pytest.raises(ValidationError) as exc:
            _optimizer(catalog).price_trusted(cart, _optimal_pricing(240000, 210000))
        assert exc.value.messages["optimal_pricing"] == ["Prices have changed, please refresh your cart"]

    def test_savings_must_match_totals(self, catalog):
        cart = _cart(("tshirt", 1), ("cap", 1))
        with pytest.raises(ValidationError):
            _optimizer(catalog).price_trusted(cart, _optimal_pricing(250000, 220000, 25000))

    def test_fractional_amount_is_rejected(self, catalog):
        cart = _cart(("tshirt", 1), ("cap", 1))
        with pytest.raises(ValidationError):
            _optimizer(catalog).price_trusted(cart, _optimal_pricing(250000, 219999.5))

    def test_final_total_above_original_is_rejected(self, catalog):
        cart = _cart(("tshirt", 1), ("cap", 1))
        with pytest.raises(ValidationError):
            _optimizer(catalog).price_trusted(cart, _optimal_pricing(250000, 260000))

    def test_missing_summary_is_rejected(self, catalog):
        with pytest.raises(ValidationError):
            _optimizer(catalog).price_trusted(_cart(("tshirt", 1)), {"combos": []})

    def test_no_savings_means_no_combo_info(self, catalog):
        result = _optimizer(catalog).price_trusted(_cart(("tshirt", 1)), _optimal_pricing(150000, 150000))
        assert result.combo_info is None
        assert result.total_amount == 150000

    def test_flag_without_payload_falls_back_to_derived(self, catalog):
        result = _optimizer(catalog).price(_cart(("tshirt", 1), ("cap", 1)), use_optimal_pricing=True)
        assert result.mode == DERIVED
        assert result.total_amount == 220000
