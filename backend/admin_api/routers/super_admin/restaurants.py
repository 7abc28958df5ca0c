"""
Restaurant management for super-admins.
"""

from fastapi import APIRouter, Depends, Query, Request

from admin_api.container import AppContainer
from admin_api.models import RestaurantDetail
from admin_api.routers._common import Pagination, PaginatedResponse, get_container, get_pagination, require_super_admin
from admin_api.services.platform import filter_stats
from shared.config.constants import StatusFilter
from shared.security.auth import Identity
from shared.security.rate_limit import ADMIN_MUTATION_LIMIT, limiter

router = APIRouter(prefix="/restaurants")


@router.get("")
async def list_restaurants(
    search: str | None = Query(default=None, max_length=200),
    status: str = Query(default=StatusFilter.ALL),
    pagination: Pagination = Depends(get_pagination),
    identity: Identity = Depends(require_super_admin),
    container: AppContainer = Depends(get_container),
) -> dict:
    """Per-restaurant statistics, filtered by name/e-mail and status."""
    stats = filter_stats(await container.aggregator.all_stats(), search, status)
    items = [s.model_dump(by_alias=True, mode="json") for s in pagination.slice(stats)]
    return PaginatedResponse(items=items, pagination=pagination, total=len(stats)).to_dict()


@router.get("/{tenant_id}", response_model=RestaurantDetail)
async def get_restaurant(
    tenant_id: str,
    identity: Identity = Depends(require_super_admin),
    container: AppContainer = Depends(get_container),
) -> RestaurantDetail:
    """Profile, full menu and counters of one restaurant."""
    await container.oracle.require_tenant_access(identity.uid, tenant_id)
    return await container.aggregator.restaurant_detail(tenant_id)


@router.post("/{tenant_id}/toggle-status")
@limiter.limit(ADMIN_MUTATION_LIMIT)
async def toggle_restaurant_status(
    request: Request,
    tenant_id: str,
    identity: Identity = Depends(require_super_admin),
    container: AppContainer = Depends(get_container),
) -> dict:
    is_active = await container.aggregator.toggle_tenant_active(tenant_id, actor=identity.uid)
    return {"userId": tenant_id, "isActive": is_active}
