"""Event handler: copies every placed order into the order spreadsheet.

Runs inline when events are processed synchronously (development, tests) and
on the Engine otherwise. A failed delivery is logged and dropped; the order
itself is already saved by the time this handler sees the event.
"""

import json

import structlog
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.events import OrderPlaced
from ordering.order.order import Order
from ordering.sheets import get_sink

logger = structlog.get_logger(__name__)


def sheet_row(event: OrderPlaced) -> dict:
    """Row sent to the order spreadsheet."""
    return {
        "orderCode": event.order_code,
        "studentId": event.student_id,
        "fullName": event.full_name,
        "email": event.email,
        "phoneNumber": event.phone_number,
        "school": event.school,
        "additionalNote": event.additional_note,
        "items": json.loads(event.lines),
        "totalAmount": event.total_amount,
    }


@ordering.event_handler(part_of=Order)
class OrderSheetSync:
    """Sends placed orders to the configured sheet sink."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        try:
            get_sink().send(sheet_row(event))
        except Exception as exc:
            logger.error("sheet_sync_failed", order_code=event.order_code, error=str(exc))
            return

        logger.info("sheet_synced", order_code=event.order_code)
