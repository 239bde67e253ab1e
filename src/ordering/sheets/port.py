"""Order sheet port: where placed orders are mirrored for the store staff.

The store team tracks orders in a spreadsheet fed by a script endpoint. The
core only needs "send this row"; delivery is best-effort.
"""

from abc import ABC, abstractmethod


class OrderSheetSink(ABC):
    """Abstract interface for order spreadsheet adapters."""

    @abstractmethod
    def send(self, payload: dict) -> None:
        """Deliver one order row. Raises on failure; callers decide what to do."""
        ...
