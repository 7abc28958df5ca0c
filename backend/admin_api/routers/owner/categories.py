"""
Category management endpoints for the signed-in owner.

The tenant is always the caller's own identity; no tenant id is accepted
from the request.
"""

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status

from admin_api.container import AppContainer
from admin_api.models import Category, CategoryCreate, CategoryUpdate
from admin_api.routers._common import get_container, require_owner
from shared.security.auth import Identity
from shared.security.rate_limit import UPLOAD_LIMIT, limiter

router = APIRouter(prefix="/api/categories", tags=["categories"])

IMAGE_KIND = "categories"


@router.get("", response_model=list[Category])
async def list_categories(
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> list[Category]:
    """Categories in display order."""
    return await container.category_service.list(identity.uid)


@router.get("/{category_id}", response_model=Category)
async def get_category(
    category_id: str,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> Category:
    return await container.category_service.get_or_404(identity.uid, category_id)


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> Category:
    """Create a category at the end of the list."""
    return await container.category_service.create(identity.uid, body.model_dump())


@router.patch("/{category_id}", response_model=Category)
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> Category:
    return await container.category_service.update(
        identity.uid, category_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> None:
    """Delete a category. Refused with 409 while menu items still use it."""
    category = await container.category_service.get_or_404(identity.uid, category_id)
    await container.category_service.delete(identity.uid, category_id)
    await container.media.remove_entity_image(identity.uid, IMAGE_KIND, category_id, category.image)


@router.post("/{category_id}/toggle-visibility", response_model=Category)
async def toggle_category_visibility(
    category_id: str,
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> Category:
    return await container.category_service.toggle_visibility(identity.uid, category_id)


@router.put("/{category_id}/image", response_model=Category)
@limiter.limit(UPLOAD_LIMIT)
async def upload_category_image(
    request: Request,
    response: Response,
    category_id: str,
    file: UploadFile = File(...),
    identity: Identity = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> Category:
    """
    Replace the category image.

    When the image host fails the category is returned unchanged and the
    ``X-Image-Upload: failed`` header is set.
    """
    service = container.category_service
    category = await service.get_or_404(identity.uid, category_id)

    url = await container.media.upload_entity_image(
        identity.uid,
        IMAGE_KIND,
        category_id,
        file.filename or "image",
        await file.read(),
        file.content_type or "",
    )
    if url is None:
        response.headers["X-Image-Upload"] = "failed"
        return category

    updated = await service.set_image(identity.uid, category_id, url)
    if category.image and category.image != url:
        await container.media.remove_entity_image(identity.uid, IMAGE_KIND, category_id, category.image)
    return updated
