"""In-memory order store for tests and local tooling."""

import threading

from ordering.errors import PersistenceError
from ordering.order.order import Order
from ordering.persistence.port import OrderStore


class InMemoryOrderStore(OrderStore):
    """Order store that keeps everything in dicts, guarded by one lock.

    Orders never pass through a repository here, so their events are not
    handled; sheet delivery is tested against RepositoryOrderStore.

    ``fail_inserts`` makes every insert raise PersistenceError, so tests can
    check that a failed save leaves no claimed code behind.
    """

    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}
        self.claimed: set[str] = set()
        self.claim_attempts: list[str] = []
        self.fail_inserts = False
        self._lock = threading.Lock()

    def find_by_code(self, code: str) -> Order | None:
        return self.orders.get(code.upper())

    def claim_code(self, code: str) -> bool:
        with self._lock:
            self.claim_attempts.append(code)
            if code in self.claimed or code in self.orders:
                return False
            self.claimed.add(code)
            return True

    def release_code(self, code: str) -> None:
        with self._lock:
            self.claimed.discard(code)

    def insert(self, order: Order) -> Order:
        if self.fail_inserts:
            raise PersistenceError(f"Order {order.order_code} could not be saved")
        with self._lock:
            if order.order_code in self.orders:
                raise PersistenceError(f"Order code {order.order_code} is already taken")
            self.orders[order.order_code] = order
        return order
