"""Order store port: the persisted-orders collection as the ordering core sees it.

Code uniqueness is enforced here. ``claim_code`` is a single atomic
claim-or-fail step: it both checks that no order or reservation holds the code
and reserves it, so two requests can never walk away with the same code.
"""

from abc import ABC, abstractmethod

from ordering.order.order import Order


class OrderStore(ABC):
    """Abstract interface for order persistence adapters."""

    @abstractmethod
    def find_by_code(self, code: str) -> Order | None:
        """Return the order holding ``code`` (exact, uppercase), or None."""
        ...

    @abstractmethod
    def claim_code(self, code: str) -> bool:
        """Reserve ``code``. Returns False if an order or another claim already holds it."""
        ...

    @abstractmethod
    def release_code(self, code: str) -> None:
        """Give back a claimed code whose order was never persisted."""
        ...

    @abstractmethod
    def insert(self, order: Order) -> Order:
        """Persist a new order. Raises PersistenceError on storage failure."""
        ...
