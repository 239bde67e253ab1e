"""Shared BDD fixtures and step definitions for combo pricing."""

import pytest
from ordering.catalogue.fake_adapter import InMemoryCatalog
from ordering.pricing.model import ComboDefinition, ProductRecord
from pytest_bdd import given, parsers, then


@pytest.fixture()
def store_catalog():
    return InMemoryCatalog()


@pytest.fixture()
def pricing_outcome():
    return {}


@given(parsers.cfparse('the catalogue has "{product_id}" priced at {price:d}'))
def _(store_catalog, product_id, price):
    store_catalog.add_product(ProductRecord(id=product_id, name=product_id.replace("-", " ").title(), price=price))


@given(parsers.cfparse('a combo "{name}" requires {quantity:d} x "{product_id}" for {combo_price:d}'))
def _(store_catalog, name, quantity, product_id, combo_price):
    store_catalog.add_combo(
        ComboDefinition(
            id=f"combo-{len(store_catalog.combos) + 1}",
            name=name,
            required_product_counts={product_id: quantity},
            combo_price=combo_price,
        )
    )


@then(parsers.cfparse("the cart total is {amount:d}"))
def _(pricing_outcome, amount):
    assert pricing_outcome["result"].total_amount == amount


@then(parsers.cfparse("the combo savings are {amount:d}"))
def _(pricing_outcome, amount):
    assert pricing_outcome["result"].combo_info.savings == amount


@then("no combo is applied")
def _(pricing_outcome):
    assert pricing_outcome["result"].combo_info is None


@then("the cart is rejected")
def _(pricing_outcome):
    assert pricing_outcome["error"] is not None
