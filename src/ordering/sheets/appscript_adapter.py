"""Google Apps Script sheet sink: POSTs the order row as JSON."""

import requests
import structlog

from ordering.sheets.port import OrderSheetSink

logger = structlog.get_logger(__name__)


class AppScriptSink(OrderSheetSink):
    def __init__(self, url: str, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        if not url:
            raise ValueError("AppScriptSink requires an endpoint URL")
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, payload: dict) -> None:
        response = self.session.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        logger.debug("sheet_row_sent", order_code=payload.get("orderCode"), status_code=response.status_code)
