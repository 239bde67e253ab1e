"""Logging for the ordering service.

Everything goes through structlog on top of the stdlib root logger, so
protean's and uvicorn's own records land in the same handlers. The
environment comes from ``PROTEAN_ENV``, the same switch that selects the
domain configuration overlay.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

_LEVELS = {"production": "INFO", "test": "WARNING"}
_JSON_ENVS = ("production", "staging")


def _environment() -> str:
    return os.getenv("PROTEAN_ENV", "development").lower()


def configure_logging(log_dir: str | None = None) -> None:
    """Route structlog and stdlib records to stdout and ``<log_dir>/ordering.log``."""
    env = _environment()
    level = os.getenv("LOG_LEVEL", _LEVELS.get(env, "DEBUG")).upper()

    log_path = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    log_path.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        logging.StreamHandler(sys.stdout),
        logging.handlers.RotatingFileHandler(
            log_path / "ordering.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        ),
    ]
    logging.getLogger("protean").setLevel(logging.WARNING)

    if env in _JSON_ENVS:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.RichTracebackFormatter(max_frames=2))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder([structlog.processors.CallsiteParameter.FUNC_NAME]),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_order_context(order_code: str) -> None:
    """Tag every record logged in this context with the order code."""
    structlog.contextvars.bind_contextvars(order_code=order_code)


def clear_order_context() -> None:
    structlog.contextvars.clear_contextvars()
