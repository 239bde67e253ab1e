"""Order codes: short, unique, easy for students to read out and type.

The alphabet leaves out 0/O and 1/I so a code copied from a screen or a
receipt survives being typed back in.
"""

import secrets
from collections.abc import Callable

import structlog

from ordering.errors import AllocationExhausted
from ordering.persistence.port import OrderStore

logger = structlog.get_logger(__name__)

ORDER_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ORDER_CODE_LENGTH = 8
MAX_ALLOCATION_ATTEMPTS = 10


def generate_order_code(length: int = ORDER_CODE_LENGTH) -> str:
    return "".join(secrets.choice(ORDER_CODE_ALPHABET) for _ in range(length))


def normalize_order_code(code: str) -> str:
    """Codes are matched case-insensitively; storage always holds uppercase."""
    return code.strip().upper()


class OrderCodeAllocator:
    """Claims a fresh order code, retrying on collision."""

    def __init__(
        self,
        store: OrderStore,
        generator: Callable[[], str] = generate_order_code,
        max_attempts: int = MAX_ALLOCATION_ATTEMPTS,
    ):
        self.store = store
        self.generator = generator
        self.max_attempts = max_attempts

    def allocate(self) -> str:
        """Return a code this caller now owns. Raises AllocationExhausted."""
        for attempt in range(1, self.max_attempts + 1):
            candidate = normalize_order_code(self.generator())
            if self.store.claim_code(candidate):
                logger.info("order_code_claimed", order_code=candidate, attempt=attempt)
                return candidate
            logger.debug("order_code_collision", order_code=candidate, attempt=attempt)

        logger.error("order_code_allocation_exhausted", attempts=self.max_attempts)
        raise AllocationExhausted(self.max_attempts)
