"""Campus store ordering API.

Prices carts, places orders and serves order lookups. Each request under
``/orders`` runs inside the ordering domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay.
from ordering.domain import ordering  # noqa: E402

ordering.init()

_DOMAIN_ROUTE_PREFIXES = ("/orders",)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the ordering services for the lifetime of the app."""
    from ordering.services import build_default_services

    services = getattr(app.state, "ordering_services", None) or build_default_services()
    app.state.ordering_services = services.open()
    try:
        yield
    finally:
        services.close()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Campus Store Ordering API",
    description="Cart pricing with combo discounts and order intake",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ordering domain context for order routes."""
    if request.url.path.startswith(_DOMAIN_ROUTE_PREFIXES):
        with ordering.domain_context():
            response = await call_next(request)
        return response
    # No domain match (health check, docs, etc.)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api import order_router, register_error_handlers  # noqa: E402

register_error_handlers(app)
app.include_router(order_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"ordering": {"name": ordering.name}},
        }
    )
