"""
The owner's own profile and dashboard counters.
"""

from fastapi import APIRouter, Depends

from admin_api.container import AppContainer
from admin_api.models import OwnerDashboardStats, Profile, ProfileUpdate
from admin_api.routers._common import get_container, require_owner
from shared.security.auth import Identity

router = APIRouter(prefix="/api", tags=["profile"])


@router.get("/profile", response_model=Profile)
async def get_profile(
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> Profile:
    """The caller's profile; created with defaults on first access."""
    return await container.profile_service.ensure_profile(identity)


@router.patch("/profile", response_model=Profile)
async def update_profile(
    body: ProfileUpdate,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> Profile:
    return await container.profile_service.update_profile(
        identity, body.model_dump(exclude_unset=True)
    )


@router.get("/dashboard", response_model=OwnerDashboardStats)
async def get_dashboard(
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> OwnerDashboardStats:
    return await container.profile_service.dashboard_stats(identity)
