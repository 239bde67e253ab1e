"""Error handlers shared by the app and the API tests."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

logger = structlog.get_logger(__name__)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as 400, like domain validation failures."""
    errors = [{"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()]
    logger.info("request_rejected", path=request.url.path, errors=len(errors))
    return JSONResponse(status_code=400, content={"error": errors})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
