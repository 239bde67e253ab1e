"""Combo expansion: turn combo items back into the products they contain."""

from collections.abc import Mapping, Sequence

from protean.exceptions import ValidationError

from ordering.pricing.model import CartItem, ComboDefinition, ExpandedItem


def expand_combo_items(items: Sequence[CartItem], combos: Mapping[str, ComboDefinition]) -> list[ExpandedItem]:
    """Flatten combo items into tagged product quantities, preserving input order."""
    expanded = []
    for item in items:
        if not item.is_combo:
            expanded.append(ExpandedItem(product_id=item.product_id, quantity=item.quantity))
            continue

        combo = combos.get(item.combo_id)
        if combo is None:
            raise ValidationError({"items": [f"Combo {item.combo_id} does not exist or is not active"]})

        for product_id, required in combo.required_product_counts.items():
            expanded.append(
                ExpandedItem(
                    product_id=product_id,
                    quantity=required * item.quantity,
                    from_combo=True,
                    combo_id=combo.id,
                    combo_name=combo.name,
                )
            )
    return expanded
