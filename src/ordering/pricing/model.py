"""Plain records the pricing engine works on.

The engine never touches aggregates or repositories: catalogue and combo data
arrive as these immutable snapshots, which keeps matching and pricing pure and
testable without a domain context.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from protean.exceptions import ValidationError


@dataclass(frozen=True)
class ProductRecord:
    """Catalogue view of a product."""

    id: str
    name: str
    price: int
    available: bool = True


@dataclass(frozen=True)
class ComboDefinition:
    """A bundle of products sold together at a fixed price."""

    id: str
    name: str
    required_product_counts: Mapping[str, int]
    combo_price: int

    def __post_init__(self):
        if not self.required_product_counts:
            raise ValidationError({"required_product_counts": [f"Combo {self.id} needs at least one product"]})
        if any(quantity < 1 for quantity in self.required_product_counts.values()):
            raise ValidationError({"required_product_counts": [f"Combo {self.id} quantities must be positive"]})

    def constituent_total(self, prices: Mapping[str, int]) -> int | None:
        """Price of one combo instance bought item by item, or None if a constituent is unpriced."""
        total = 0
        for product_id, quantity in self.required_product_counts.items():
            if product_id not in prices:
                return None
            total += prices[product_id] * quantity
        return total


@dataclass(frozen=True)
class CartItem:
    """A requested product, or a client-selected combo when ``is_combo`` is set."""

    product_id: str | None
    quantity: int
    is_combo: bool = False
    combo_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CartItem":
        """Build a cart item from its wire form (camelCase or snake_case keys)."""
        quantity = payload.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"items": [f"Quantity must be a positive integer, got {quantity!r}"]})

        is_combo = bool(payload.get("isCombo", payload.get("is_combo", False)))
        product_id = payload.get("productId", payload.get("product_id"))
        combo_id = payload.get("comboId", payload.get("combo_id"))

        if is_combo and not combo_id:
            raise ValidationError({"items": ["Combo items must reference a combo"]})
        if not is_combo and not product_id:
            raise ValidationError({"items": ["Each item must reference a product"]})

        return cls(
            product_id=str(product_id) if product_id else None,
            quantity=quantity,
            is_combo=is_combo,
            combo_id=str(combo_id) if combo_id else None,
        )

    def to_dict(self) -> dict:
        data = {"productId": self.product_id, "quantity": self.quantity}
        if self.is_combo:
            data.update(isCombo=True, comboId=self.combo_id)
        return data


@dataclass(frozen=True)
class ExpandedItem:
    """A concrete product quantity, tagged with the combo it came from."""

    product_id: str
    quantity: int
    from_combo: bool = False
    combo_id: str | None = None
    combo_name: str | None = None


@dataclass(frozen=True)
class OrderLine:
    """A priced order line. ``unit_price`` is what is charged, ``list_price`` the catalogue price."""

    product_id: str
    product_name: str
    unit_price: int
    list_price: int
    quantity: int
    from_combo: bool = False
    combo_id: str | None = None
    combo_name: str | None = None

    @property
    def amount(self) -> int:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "unitPrice": self.unit_price,
            "listPrice": self.list_price,
            "quantity": self.quantity,
            "fromCombo": self.from_combo,
            "comboId": self.combo_id,
            "comboName": self.combo_name,
        }


@dataclass(frozen=True)
class SingleComboInfo:
    """Savings from one combo kind chosen by server-side matching."""

    combo_id: str
    combo_name: str
    savings: int
    message: str
    mode: str = field(default="single", init=False)

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "comboId": self.combo_id,
            "comboName": self.combo_name,
            "savings": self.savings,
            "message": self.message,
        }


@dataclass(frozen=True)
class AggregateComboInfo:
    """Savings spread over several combos, as produced by a whole-cart optimizer."""

    savings: int
    original_total: int
    final_total: int
    combos: list = field(default_factory=list)
    breakdown: list = field(default_factory=list)
    mode: str = field(default="aggregate", init=False)

    def __post_init__(self):
        if self.original_total - self.final_total != self.savings:
            raise ValidationError(
                {"optimal_pricing": ["Savings must equal the difference between original and final totals"]}
            )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "savings": self.savings,
            "originalTotal": self.original_total,
            "finalTotal": self.final_total,
            "combos": list(self.combos),
            "breakdown": list(self.breakdown),
        }


ComboInfo = SingleComboInfo | AggregateComboInfo


@dataclass(frozen=True)
class PricingResult:
    """Priced lines plus totals.

    ``total_amount == sum(line.amount) - discount_total`` always holds. In
    derived mode combo savings live inside the line prices and
    ``discount_total`` is zero; in trusted mode lines carry catalogue prices
    and the trusted savings are held in ``discount_total``.
    """

    mode: str
    lines: tuple[OrderLine, ...]
    total_amount: int
    original_total: int
    discount_total: int = 0
    combo_info: ComboInfo | None = None

    @property
    def savings(self) -> int:
        return self.original_total - self.total_amount

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "lines": [line.to_dict() for line in self.lines],
            "totalAmount": self.total_amount,
            "originalTotal": self.original_total,
            "discountTotal": self.discount_total,
            "comboInfo": self.combo_info.to_dict() if self.combo_info else None,
        }
