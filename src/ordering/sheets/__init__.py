"""Order spreadsheet sink factory.

Provides get_sink() / set_sink() to swap implementations:
- FakeSheetSink for development and testing
- AppScriptSink for the store's Google Sheet (SHEET_SINK=appscript)
"""

import os

from ordering.sheets.port import OrderSheetSink

_current_sink: OrderSheetSink | None = None


def build_sink() -> OrderSheetSink:
    """Return the sink named by SHEET_SINK ("fake" by default)."""
    adapter = os.environ.get("SHEET_SINK", "fake")
    if adapter == "fake":
        from ordering.sheets.fake_adapter import FakeSheetSink

        return FakeSheetSink()
    if adapter == "appscript":
        from ordering.sheets.appscript_adapter import AppScriptSink

        return AppScriptSink(
            url=os.environ.get("APPSCRIPT_URL", ""),
            timeout=float(os.environ.get("APPSCRIPT_TIMEOUT", "10")),
        )
    raise ValueError(f"Unknown sheet sink: {adapter}")


def get_sink() -> OrderSheetSink:
    """Return the active sink, building the configured one on first use."""
    global _current_sink
    if _current_sink is None:
        _current_sink = build_sink()
    return _current_sink


def set_sink(sink: OrderSheetSink) -> None:
    """Override the active sink (the services handle and tests do this)."""
    global _current_sink
    _current_sink = sink


def reset_sink() -> None:
    global _current_sink
    _current_sink = None
