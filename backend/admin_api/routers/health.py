"""
Health endpoints.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from admin_api.container import AppContainer
from admin_api.routers._common import get_container
from shared.utils.health import aggregate_health_checks, health_check_with_timeout

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health_check(container: AppContainer = Depends(get_container)) -> dict:
    """Liveness only; no dependency is contacted."""
    return {
        "status": "healthy",
        "service": "menu-admin",
        "environment": container.settings.environment,
    }


@router.get("/detailed")
async def detailed_health_check(container: AppContainer = Depends(get_container)):
    """Document store (and Redis when the change feed is on). 503 if anything is down."""

    @health_check_with_timeout(timeout=3.0, component="document_store")
    async def check_store():
        await container.store.ping()
        return {"backend": container.store.backend_name, "listeners": container.store.listener_count}

    checks = [check_store()]

    if container.redis_client is not None:
        @health_check_with_timeout(timeout=3.0, component="redis")
        async def check_redis():
            await container.redis_client.ping()
            return {"change_feed": container.change_feed is not None and container.change_feed.running}

        checks.append(check_redis())

    result = await aggregate_health_checks(checks)
    result["service"] = "menu-admin"
    if result["status"] != "healthy":
        return JSONResponse(content=result, status_code=503)
    return result
