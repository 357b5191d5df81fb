"""Calista Reviews FastAPI application.

Serves the storefront review endpoints and the admin moderation endpoints.
Commands are processed synchronously inside the request; every request runs
inside the reviews domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - default      → memory provider, sync event processing
#   - "production" → PostgreSQL, async event processing via the Engine
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from reviews.domain import reviews  # noqa: E402

reviews.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Calista Reviews API",
    description="Product reviews, rating summaries and helpfulness votes",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Middleware, error handlers and routers
# ---------------------------------------------------------------------------
from reviews.api import (  # noqa: E402
    admin_router,
    domain_request_middleware,
    register_unavailable_handlers,
    review_router,
)

# Each request runs inside the domain context and its own logging scope
app.middleware("http")(domain_request_middleware)

register_exception_handlers(app)
register_unavailable_handlers(app)

app.include_router(review_router)
app.include_router(admin_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": reviews.name}})
