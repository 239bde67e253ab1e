"""Ordering domain API package."""

from ordering.api.handlers import register_error_handlers
from ordering.api.routes import order_router

__all__ = ["order_router", "register_error_handlers"]
