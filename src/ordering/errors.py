"""Infrastructure-level failures raised while placing an order.

Business rule violations use protean's ``ValidationError``; these two cover
the failures that are not the customer's fault.
"""


class AllocationExhausted(Exception):
    """No unique order code could be claimed within the attempt budget."""

    def __init__(self, attempts: int):
        super().__init__(f"Could not allocate a unique order code after {attempts} attempts")
        self.attempts = attempts


class PersistenceError(Exception):
    """The order store failed to persist an order."""
