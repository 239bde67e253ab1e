"""Fake sheet sink: records rows in memory for test assertions."""

import threading

from ordering.sheets.port import OrderSheetSink


class FakeSheetSink(OrderSheetSink):
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Sheet endpoint unavailable"
        self._lock = threading.Lock()

    def configure(self, should_succeed: bool, failure_reason: str = "Sheet endpoint unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, payload: dict) -> None:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)
        with self._lock:
            self.sent.append(payload)
