"""Order placement: the submitted order form and the service that carries it out.

Placing an order runs in a fixed sequence: parse and price the cart, check the
customer details, claim an order code, then build and save the Order.
Everything up to the claim is validation; nothing is claimed or saved for a
request that fails it. Saving the Order releases its ``OrderPlaced`` event,
which the sheet event handler picks up.

The service writes through the order store directly instead of running as a
command handler, so that the code reservation is visible to concurrent
requests as soon as it is made.
"""

import json

import structlog
from protean.exceptions import ValidationError
from protean.fields import Boolean, String, Text

from ordering.domain import ordering
from ordering.order.code import OrderCodeAllocator
from ordering.order.order import CustomerDetails, Order
from ordering.persistence.port import OrderStore
from ordering.pricing.model import CartItem
from ordering.pricing.optimizer import PriceOptimizer
from ordering.utils.logging import bind_order_context, clear_order_context

logger = structlog.get_logger(__name__)


@ordering.value_object
class OrderSubmission:
    """The order form as the storefront submitted it."""

    student_id = String(required=True, max_length=50)
    full_name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    phone_number = String(required=True, max_length=20)
    school = String(required=True, max_length=255)
    additional_note = Text()
    items = Text(required=True)  # JSON: list of cart item dicts
    use_optimal_pricing = Boolean(default=False)
    optimal_pricing = Text()  # JSON: {summary, combos, breakdown}


def _load_json(raw, field):
    if raw is None or not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError({field: [f"Malformed JSON: {exc.msg}"]}) from exc


def parse_cart(raw_items) -> list[CartItem]:
    """Turn the wire-form item list into CartItems. Raises ValidationError."""
    items = _load_json(raw_items, "items")
    if not isinstance(items, list) or not items:
        raise ValidationError({"items": ["At least one item is required"]})
    for entry in items:
        if not isinstance(entry, dict):
            raise ValidationError({"items": ["Each item must be an object"]})
    return [CartItem.from_payload(entry) for entry in items]


def parse_optimal_pricing(raw):
    payload = _load_json(raw, "optimal_pricing")
    if payload is not None and not isinstance(payload, dict):
        raise ValidationError({"optimal_pricing": ["Optimal pricing must be an object"]})
    return payload


class OrderAssembler:
    def __init__(self, optimizer: PriceOptimizer, allocator: OrderCodeAllocator, store: OrderStore):
        self.optimizer = optimizer
        self.allocator = allocator
        self.store = store

    def place(self, submission: OrderSubmission) -> dict:
        """Price and persist an order.

        Returns ``{orderCode, totalAmount, status, createdAt, lines}`` plus
        ``comboInfo`` when the customer saved money.

        Raises:
            ValidationError: bad cart, bad customer details, or rejected pricing.
            AllocationExhausted: no free order code could be claimed.
            PersistenceError: the order could not be saved.
        """
        cart_items = parse_cart(submission.items)
        pricing = self.optimizer.price(
            cart_items,
            use_optimal_pricing=bool(submission.use_optimal_pricing),
            optimal_pricing=parse_optimal_pricing(submission.optimal_pricing),
        )
        customer = CustomerDetails(
            student_id=submission.student_id,
            full_name=submission.full_name,
            email=submission.email,
            phone_number=submission.phone_number,
            school=submission.school,
            additional_note=submission.additional_note,
        )

        order_code = self.allocator.allocate()
        bind_order_context(order_code=order_code)
        try:
            try:
                order = Order.place(order_code, customer, pricing)
                self.store.insert(order)
            except Exception:
                self.store.release_code(order_code)
                logger.warning("order_code_released", order_code=order_code)
                raise

            logger.info(
                "order_placed",
                student_id=customer.student_id,
                total_amount=order.total_amount,
                pricing_mode=pricing.mode,
                line_count=len(pricing.lines),
            )
        finally:
            clear_order_context()

        result = {
            "orderCode": order.order_code,
            "totalAmount": order.total_amount,
            "status": order.status,
            "createdAt": order.created_at.isoformat(),
            "lines": [line.to_dict() for line in pricing.lines],
        }
        if pricing.combo_info is not None:
            result["comboInfo"] = pricing.combo_info.to_dict()
        return result
