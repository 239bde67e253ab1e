"""Product aggregate: the merchandise the store sells.

Prices are whole currency units (VND); there is no fractional pricing.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text

from ordering.domain import ordering
from ordering.pricing.model import ProductRecord


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    category = String(max_length=100)
    image = String(max_length=500)
    price = Integer(required=True, min_value=0)
    stock_quantity = Integer(default=0, min_value=0)
    available = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def create(cls, name, price, description=None, category=None, image=None, stock_quantity=0, product_id=None):
        identity = {"id": product_id} if product_id else {}
        return cls(
            **identity,
            name=name,
            price=price,
            description=description,
            category=category,
            image=image,
            stock_quantity=stock_quantity,
            available=True,
            created_at=datetime.now(UTC),
        )

    def withdraw(self):
        """Take the product off sale. Existing orders keep their lines."""
        if not self.available:
            raise ValidationError({"available": ["Product is already unavailable"]})
        self.available = False

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=str(self.id),
            name=self.name,
            price=self.price,
            available=bool(self.available),
        )
