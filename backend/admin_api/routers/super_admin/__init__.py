"""
Super-admin area. Every route here passes the SuperAdminRoute gate first;
non-admins are redirected (303) to the owner dashboard.
"""

from fastapi import APIRouter, Depends

from admin_api.container import AppContainer
from admin_api.models import PlatformStats
from admin_api.routers._common import get_container, require_super_admin
from shared.security.auth import Identity

from .restaurants import router as restaurants_router
from .users import router as users_router

router = APIRouter(prefix="/api/super-admin", tags=["super-admin"])


@router.get("/stats", response_model=PlatformStats)
async def get_platform_stats(
    identity: Identity = Depends(require_super_admin),
    container: AppContainer = Depends(get_container),
) -> PlatformStats:
    return await container.aggregator.platform_stats()


router.include_router(restaurants_router)
router.include_router(users_router)

__all__ = ["router"]
