"""
Application root: forwards each identity to the dashboard for its role.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from admin_api.container import AppContainer
from admin_api.routers._common import current_identity, get_container
from shared.security.auth import Identity

router = APIRouter(tags=["root"])


@router.get("/")
async def root(
    identity: Identity | None = Depends(current_identity),
    container: AppContainer = Depends(get_container),
):
    """
    Anonymous callers get the login landing payload (no redirect);
    authenticated callers are redirected (303) to their dashboard.
    """
    decision = await container.gate.role_redirect(identity)
    if decision.navigate is not None:
        return RedirectResponse(url=decision.navigate.to, status_code=status.HTTP_303_SEE_OTHER)
    return {"view": decision.view.value}
