"""
User (account) management for super-admins: roles and activation.
"""

from fastapi import APIRouter, Depends, Query, Request

from admin_api.container import AppContainer
from admin_api.models import Profile, RoleUpdate, StatusUpdate
from admin_api.routers._common import Pagination, PaginatedResponse, get_container, get_pagination, require_super_admin
from admin_api.services.platform import filter_users
from admin_api.services.platform.filters import ROLE_FILTER_ALL
from shared.config.constants import StatusFilter
from shared.security.auth import Identity
from shared.security.rate_limit import ADMIN_MUTATION_LIMIT, limiter
from shared.utils.exceptions import NotFoundError

router = APIRouter(prefix="/users")


@router.get("")
async def list_users(
    search: str | None = Query(default=None, max_length=200),
    role: str = Query(default=ROLE_FILTER_ALL),
    status: str = Query(default=StatusFilter.ALL),
    pagination: Pagination = Depends(get_pagination),
    identity: Identity = Depends(require_super_admin),
    container: AppContainer = Depends(get_container),
) -> dict:
    users = filter_users(await container.aggregator.list_all_users(), search, role, status)
    items = [u.model_dump(by_alias=True, mode="json") for u in pagination.slice(users)]
    return PaginatedResponse(items=items, pagination=pagination, total=len(users)).to_dict()


@router.patch("/{tenant_id}/role", response_model=Profile)
@limiter.limit(ADMIN_MUTATION_LIMIT)
async def update_user_role(
    request: Request,
    tenant_id: str,
    body: RoleUpdate,
    identity: Identity = Depends(require_super_admin),
    container: AppContainer = Depends(get_container),
) -> Profile:
    """Promote or demote an account. The last active super-admin cannot be demoted."""
    await container.aggregator.set_tenant_role(tenant_id, body.role, actor=identity.uid)
    return await _reload(container, tenant_id)


@router.patch("/{tenant_id}/status", response_model=Profile)
@limiter.limit(ADMIN_MUTATION_LIMIT)
async def update_user_status(
    request: Request,
    tenant_id: str,
    body: StatusUpdate,
    identity: Identity = Depends(require_super_admin),
    container: AppContainer = Depends(get_container),
) -> Profile:
    await container.aggregator.set_tenant_active(tenant_id, body.is_active, actor=identity.uid)
    return await _reload(container, tenant_id)


async def _reload(container: AppContainer, tenant_id: str) -> Profile:
    profile = await container.profiles.get_profile(tenant_id)
    if profile is None:
        raise NotFoundError("Profile", tenant_id)
    return profile
