"""Ordering bounded context: cart pricing, combo discounts and order intake.

Prices carts against the merchandise catalogue (applying combo bundles when
they are cheaper), allocates unique order codes and records orders with their
status history.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging

configure_logging()

ordering = Domain(name="ordering")
