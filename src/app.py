"""Art marketplace FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering  # noqa: E402
from subscriptions.domain import subscriptions  # noqa: E402

from shared.api import register_error_handlers
from shared.logging import add_context, clear_context

ordering.init()
subscriptions.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/orders": ordering,
    "/shipping": ordering,
    "/admin/orders": ordering,
    "/plans": subscriptions,
    "/subscriptions": subscriptions,
    "/admin/plans": subscriptions,
    "/admin/subscriptions": subscriptions,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path == prefix or path.startswith(prefix + "/"):
            return domain
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Art Marketplace API",
    description="Order fulfillment and seller subscriptions",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request.

    The caller and path are bound to the structlog context so every log line
    emitted while handling the request carries them.
    """
    clear_context()
    add_context(path=request.url.path, actor_id=request.headers.get("x-user-id"))
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: health check, docs
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api.routes import admin_order_router, order_router, shipping_router  # noqa: E402
from subscriptions.api.routes import (  # noqa: E402
    admin_plan_router,
    admin_subscription_router,
    plan_router,
    subscription_router,
)

app.include_router(order_router)
app.include_router(shipping_router)
app.include_router(admin_order_router)
app.include_router(plan_router)
app.include_router(admin_plan_router)
app.include_router(subscription_router)
app.include_router(admin_subscription_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "ordering": {"name": ordering.name},
                "subscriptions": {"name": subscriptions.name},
            },
        }
    )
