"""Order lookup by code, for the "track my order" page."""

import structlog
from protean.exceptions import ObjectNotFoundError

from ordering.order.code import normalize_order_code
from ordering.persistence.port import OrderStore

logger = structlog.get_logger(__name__)


def _isoformat(value):
    return value.isoformat() if value is not None else None


def get_order_summary(store: OrderStore, order_code: str) -> dict:
    """Return the persisted view of an order. Codes match case-insensitively."""
    code = normalize_order_code(order_code)
    order = store.find_by_code(code)
    if order is None:
        logger.info("order_lookup_missed", order_code=code)
        raise ObjectNotFoundError(f"Order {code} not found")

    return {
        "orderCode": order.order_code,
        "studentId": order.customer.student_id,
        "fullName": order.customer.full_name,
        "status": order.status,
        "totalAmount": order.total_amount,
        "createdAt": _isoformat(order.created_at),
        "statusUpdatedAt": _isoformat(order.status_updated_at),
        "comboInfo": order.combo_summary,
        "items": [
            {"productName": line.product_name, "quantity": line.quantity, "price": line.unit_price}
            for line in order.lines
        ],
    }
