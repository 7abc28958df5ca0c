"""
Menu item management endpoints for the signed-in owner.
"""

from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile, status

from admin_api.container import AppContainer
from admin_api.models import MenuItem, MenuItemCreate, MenuItemUpdate
from admin_api.routers._common import get_container, require_owner
from shared.security.auth import Identity
from shared.security.rate_limit import UPLOAD_LIMIT, limiter

router = APIRouter(prefix="/api/menu-items", tags=["menu-items"])

IMAGE_KIND = "menu-items"


@router.get("", response_model=list[MenuItem])
async def list_menu_items(
    category_id: str | None = Query(default=None, alias="categoryId"),
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> list[MenuItem]:
    """Menu items, newest first, optionally limited to one category."""
    if category_id:
        return await container.menu_item_service.list_by_category(identity.uid, category_id)
    return await container.menu_item_service.list(identity.uid)


@router.get("/orphaned", response_model=list[MenuItem])
async def list_orphaned_menu_items(
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> list[MenuItem]:
    """Items that point at a category which no longer exists."""
    return await container.category_service.find_orphaned_items(identity.uid)


@router.get("/{item_id}", response_model=MenuItem)
async def get_menu_item(
    item_id: str,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> MenuItem:
    return await container.menu_item_service.get_or_404(identity.uid, item_id)


@router.post("", response_model=MenuItem, status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    body: MenuItemCreate,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> MenuItem:
    return await container.menu_item_service.create(identity.uid, body.model_dump())


@router.patch("/{item_id}", response_model=MenuItem)
async def update_menu_item(
    item_id: str,
    body: MenuItemUpdate,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> MenuItem:
    return await container.menu_item_service.update(
        identity.uid, item_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(
    item_id: str,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> None:
    item = await container.menu_item_service.get_or_404(identity.uid, item_id)
    await container.menu_item_service.delete(identity.uid, item_id)
    await container.media.remove_entity_image(identity.uid, IMAGE_KIND, item_id, item.image)


@router.post("/{item_id}/toggle-availability", response_model=MenuItem)
async def toggle_menu_item_availability(
    item_id: str,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> MenuItem:
    return await container.menu_item_service.toggle_availability(identity.uid, item_id)


@router.put("/{item_id}/image", response_model=MenuItem)
@limiter.limit(UPLOAD_LIMIT)
async def upload_menu_item_image(
    request: Request,
    response: Response,
    item_id: str,
    file: UploadFile = File(...),
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> MenuItem:
    """Replace the item image; on host failure the item is returned unchanged."""
    service = container.menu_item_service
    item = await service.get_or_404(identity.uid, item_id)

    url = await container.media.upload_entity_image(
        identity.uid,
        IMAGE_KIND,
        item_id,
        file.filename or "image",
        await file.read(),
        file.content_type or "",
    )
    if url is None:
        response.headers["X-Image-Upload"] = "failed"
        return item

    updated = await service.set_image(identity.uid, item_id, url)
    if item.image and item.image != url:
        await container.media.remove_entity_image(identity.uid, IMAGE_KIND, item_id, item.image)
    return updated
