"""Florist FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the florist domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - unset        -> in-memory providers, sync processing
#   - "production" -> PostgreSQL/Redis, async processing (handlers run in src/server.py)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from structlog.contextvars import bound_contextvars

from florist.domain import florist

florist.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Florist API",
    description="Bouquet shop: catalogue, cart, orders, payments and order notifications",
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
    """Push the florist domain context and bind request details for logging."""
    with florist.domain_context(), bound_contextvars(method=request.method, path=request.url.path):
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from florist.api import (  # noqa: E402
    account_router,
    bouquet_router,
    cart_router,
    device_token_router,
    material_router,
    order_router,
    payment_router,
)
from florist.api.errors import register_error_handlers  # noqa: E402

app.include_router(material_router)
app.include_router(bouquet_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(payment_router)
app.include_router(device_token_router)
app.include_router(account_router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": florist.name})
