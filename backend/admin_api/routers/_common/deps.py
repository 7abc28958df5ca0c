"""
Shared router dependencies: container access, identity and route gates.

Gate decisions map onto HTTP as follows:
- login view -> 401 with ``WWW-Authenticate: Bearer``
- navigation -> 303 with ``Location``
- authorized -> the handler runs
"""

from fastapi import Depends, HTTPException, Request, status

from admin_api.container import AppContainer
from admin_api.services.access import GateDecision, View
from shared.infrastructure.correlation import bind_tenant
from shared.security.auth import Identity, optional_identity


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def current_identity(
    request: Request,
    identity: Identity | None = Depends(optional_identity),
) -> Identity | None:
    """Resolve the bearer token and remember the identity for rate limiting."""
    request.state.identity = identity
    return identity


def raise_for_decision(decision: GateDecision) -> None:
    if decision.allowed:
        return
    if decision.view == View.LOGIN:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if decision.navigate is not None:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Access denied",
            headers={"Location": decision.navigate.to},
        )
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")


async def require_owner(
    request: Request,
    identity: Identity | None = Depends(current_identity),
    container: AppContainer = Depends(get_container),
) -> Identity:
    """ProtectedRoute: any authenticated identity; its uid is the tenant id."""
    decision = await container.gate.protected_route(identity, request.url.path)
    raise_for_decision(decision)
    bind_tenant(identity.uid)
    return identity


async def require_super_admin(
    request: Request,
    identity: Identity | None = Depends(current_identity),
    container: AppContainer = Depends(get_container),
) -> Identity:
    """SuperAdminRoute: non-admins are sent to the owner dashboard."""
    decision = await container.gate.super_admin_route(identity, request.url.path)
    raise_for_decision(decision)
    bind_tenant(identity.uid)
    return identity
