"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across
users. State keeps the order codes returned by POST /orders so follow-up
lookups can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class OrderState:
    """Tracks state for a single simulated student's orders."""

    quoted_total: int | None = None
    order_code: str | None = None
    order_codes: list[str] = field(default_factory=list)
