"""Combo aggregate: products bundled together at a fixed price."""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String

from ordering.domain import ordering
from ordering.pricing.model import ComboDefinition


@ordering.entity(part_of="Combo")
class ComboComponent:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.aggregate
class Combo:
    name = String(required=True, max_length=255)
    combo_price = Integer(required=True, min_value=0)
    components = HasMany(ComboComponent)
    active = Boolean(default=True)
    position = Integer(default=0)  # Definition order; earlier combos win ties
    created_at = DateTime()

    @invariant.post
    def components_must_be_distinct_products(self):
        product_ids = [str(component.product_id) for component in self.components]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"components": ["A product can appear only once in a combo"]})

    @classmethod
    def create(cls, name, combo_price, required_product_counts, position=0, combo_id=None):
        """Create a combo from a ``{product_id: quantity}`` mapping."""
        if not required_product_counts:
            raise ValidationError({"components": ["A combo needs at least one product"]})

        identity = {"id": combo_id} if combo_id else {}
        return cls(
            **identity,
            name=name,
            combo_price=combo_price,
            components=[
                ComboComponent(product_id=product_id, quantity=quantity)
                for product_id, quantity in required_product_counts.items()
            ],
            active=True,
            position=position,
            created_at=datetime.now(UTC),
        )

    def deactivate(self):
        self.active = False

    def to_definition(self) -> ComboDefinition:
        return ComboDefinition(
            id=str(self.id),
            name=self.name,
            required_product_counts={str(component.product_id): component.quantity for component in self.components},
            combo_price=self.combo_price,
        )
