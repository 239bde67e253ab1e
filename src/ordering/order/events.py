"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A priced order was accepted and given its order code."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    student_id = String(required=True)
    full_name = String(required=True)
    email = String(required=True)
    phone_number = String(required=True)
    school = String(required=True)
    additional_note = Text()
    total_amount = Integer(required=True)
    discount_total = Integer(default=0)
    pricing_mode = String(required=True)
    lines = Text(required=True)  # JSON: list of line dicts
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """Fulfilment moved the order to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    updated_by = String(required=True)
    note = String()
    changed_at = DateTime(required=True)
