"""
Admin API main application.
Entry point for the FastAPI server.

Run:
    uvicorn admin_api.main:app --app-dir backend --port 8000
"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from admin_api.core import configure_cors, lifespan, register_middlewares
from admin_api.routers import (
    health_router,
    live_router,
    owner_router,
    root_router,
    super_admin_router,
)
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler


app = FastAPI(
    title="Menu Admin API",
    description="Multi-tenant restaurant menu administration",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

configure_cors(app)
register_middlewares(app)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(root_router)
app.include_router(health_router)
app.include_router(owner_router)
app.include_router(super_admin_router)
app.include_router(live_router)
