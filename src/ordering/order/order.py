"""Order aggregate: a priced, code-stamped purchase by a student.

Orders are created once, already confirmed, from a PricingResult. The order
code never changes after creation. Fulfilment later moves the status forward,
and every move is appended to the status history.

State Machine:
    CONFIRMED → PAID → DELIVERED
    CONFIRMED / PAID → CANCELLED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.pricing.model import PricingResult

SYSTEM_ACTOR = "system"

ORDER_CREATED_NOTE = "Order created by the system"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CONFIRMED = "confirmed"
    PAID = "paid"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.CONFIRMED: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class CustomerDetails:
    """Who placed the order, as typed on the order form.

    Captured at submission time and never synced with any student record.
    """

    student_id = String(required=True, max_length=50)
    full_name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    phone_number = String(required=True, max_length=20)
    school = String(required=True, max_length=255)
    additional_note = Text()

    @invariant.post
    def email_must_be_well_formed(self):
        email = self.email or ""
        local_part, _, domain_part = email.partition("@")
        if not local_part or "@" in domain_part or "." not in domain_part or " " in email:
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

    @invariant.post
    def phone_number_must_be_dialable(self):
        digits = (self.phone_number or "").replace(" ", "").replace("-", "").removeprefix("+")
        if not digits.isdigit():
            raise ValidationError({"phone_number": [f"Invalid phone number: {self.phone_number!r}"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """A concrete product on the order.

    ``unit_price`` is what was charged per unit (combo-adjusted for combo
    lines); ``list_price`` is the catalogue price at the time of ordering.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    unit_price = Integer(required=True, min_value=0)
    list_price = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    from_combo = Boolean(default=False)
    combo_id = Identifier()
    combo_name = String(max_length=255)


@ordering.entity(part_of="Order")
class StatusChange:
    status = String(required=True, max_length=20)
    updated_by = String(required=True, max_length=255)
    updated_at = DateTime(required=True)
    note = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_code = String(required=True, max_length=16, unique=True)
    customer = ValueObject(CustomerDetails, required=True)
    lines = HasMany(OrderLine)
    total_amount = Integer(required=True, min_value=0)
    original_total = Integer(default=0, min_value=0)
    discount_total = Integer(default=0, min_value=0)
    pricing_mode = String(max_length=20)
    combo_info = Text()  # JSON: tagged combo summary, absent when nothing was saved
    status = String(choices=OrderStatus, default=OrderStatus.CONFIRMED.value)
    status_history = HasMany(StatusChange)
    last_updated_by = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_lines(self):
        if not self.lines:
            return
        charged = sum(line.unit_price * line.quantity for line in self.lines)
        if charged - (self.discount_total or 0) != self.total_amount:
            raise ValidationError({"total_amount": ["Total amount must equal the line amounts less discounts"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_code, customer, pricing: PricingResult):
        """Create a confirmed order from a pricing result.

        Args:
            order_code: A code already claimed through the order store.
            customer: CustomerDetails, or a dict with student_id, full_name,
                      email, phone_number, school and optional additional_note.
            pricing: The priced cart.
        """
        if not pricing.lines:
            raise ValidationError({"items": ["An order needs at least one line"]})

        now = datetime.now(UTC)
        order = cls(
            order_code=order_code.upper(),
            customer=customer if isinstance(customer, CustomerDetails) else CustomerDetails(**customer),
            lines=[
                OrderLine(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    unit_price=line.unit_price,
                    list_price=line.list_price,
                    quantity=line.quantity,
                    from_combo=line.from_combo,
                    combo_id=line.combo_id,
                    combo_name=line.combo_name,
                )
                for line in pricing.lines
            ],
            total_amount=pricing.total_amount,
            original_total=pricing.original_total,
            discount_total=pricing.discount_total,
            pricing_mode=pricing.mode,
            combo_info=json.dumps(pricing.combo_info.to_dict()) if pricing.combo_info else None,
            status=OrderStatus.CONFIRMED.value,
            status_history=[
                StatusChange(
                    status=OrderStatus.CONFIRMED.value,
                    updated_by=SYSTEM_ACTOR,
                    updated_at=now,
                    note=ORDER_CREATED_NOTE,
                )
            ],
            last_updated_by=SYSTEM_ACTOR,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_code=order.order_code,
                student_id=order.customer.student_id,
                full_name=order.customer.full_name,
                email=order.customer.email,
                phone_number=order.customer.phone_number,
                school=order.customer.school,
                additional_note=order.customer.additional_note,
                total_amount=order.total_amount,
                discount_total=order.discount_total,
                pricing_mode=pricing.mode,
                lines=json.dumps([line.to_dict() for line in pricing.lines]),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status history
    # -------------------------------------------------------------------
    def change_status(self, new_status, updated_by, note=None):
        """Move the order to ``new_status`` and record who did it."""
        current = OrderStatus(self.status)
        target = OrderStatus(new_status)
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.add_status_history(StatusChange(status=target.value, updated_by=updated_by, updated_at=now, note=note))
        self.last_updated_by = updated_by
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_code=self.order_code,
                previous_status=current.value,
                new_status=target.value,
                updated_by=updated_by,
                note=note,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------
    @property
    def combo_summary(self):
        return json.loads(self.combo_info) if self.combo_info else None

    @property
    def status_updated_at(self):
        if not self.status_history:
            return self.created_at
        return max(change.updated_at for change in self.status_history)
