"""Order store backed by the domain's repositories.

Claims go through a lock owned by the store instance, and every write is made
outside a unit of work so it is visible to the next claim immediately. The
lock only covers one process; across processes the reservation's identity is
the arbiter, and a rejected write is a lost claim.
"""

import threading
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.errors import PersistenceError
from ordering.order.order import Order
from ordering.persistence.port import OrderStore
from ordering.persistence.reservation import OrderCodeReservation

logger = structlog.get_logger(__name__)


class RepositoryOrderStore(OrderStore):
    def __init__(self) -> None:
        self._claim_lock = threading.Lock()

    def find_by_code(self, code: str) -> Order | None:
        orders = current_domain.repository_for(Order)._dao.query.filter(order_code=code.upper()).all().items
        return orders[0] if orders else None

    def claim_code(self, code: str) -> bool:
        repo = current_domain.repository_for(OrderCodeReservation)
        with self._claim_lock:
            try:
                repo.get(code)
                return False
            except ObjectNotFoundError:
                pass

            if self.find_by_code(code) is not None:
                return False

            try:
                repo.add(OrderCodeReservation(code=code, reserved_at=datetime.now(UTC)))
            except ValidationError:
                # Another process reserved the code after our read
                logger.info("order_code_claim_lost", order_code=code)
                return False
            return True

    def release_code(self, code: str) -> None:
        repo = current_domain.repository_for(OrderCodeReservation)
        with self._claim_lock:
            try:
                reservation = repo.get(code)
            except ObjectNotFoundError:
                return
            repo._dao.delete(reservation)

    def insert(self, order: Order) -> Order:
        try:
            current_domain.repository_for(Order).add(order)
        except Exception as exc:
            logger.error("order_insert_failed", order_code=order.order_code, error=str(exc))
            raise PersistenceError(f"Order {order.order_code} could not be saved") from exc
        return order
