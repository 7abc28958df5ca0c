"""
Image upload for categories and menu items.

Usage:
    media = MediaService(uploader)
    url = await media.upload_entity_image(tenant_id, "menu-items", item_id, upload)
"""

from __future__ import annotations

from shared.config.constants import ImageLimits
from shared.config.logging import get_logger
from shared.config.settings import Settings
from shared.utils.exceptions import ExternalServiceError
from .imagekit import ImageKitUploader, optimized_image_url, thumbnail_url, sign_upload
from .uploader import AssetUploader, InlineImageUploader, UploadedAsset, validate_image_file

logger = get_logger(__name__)

ENTITY_FOLDERS = frozenset({"menu-items", "categories"})


def entity_folder(tenant_id: str, kind: str, entity_id: str) -> str:
    """``/users/{tenant}/{kind}/{entity}/``"""
    if kind not in ENTITY_FOLDERS:
        raise ValueError(f"Unknown image kind: {kind}")
    return f"/users/{tenant_id}/{kind}/{entity_id}/"


class MediaService:
    """
    Uploads entity images and isolates upload failures.

    An unacceptable file is the caller's error (InvalidImageError). A failing
    image host is not: it is logged and None is returned, so the entity
    write that follows still happens, just without an image.
    """

    def __init__(self, uploader: AssetUploader, max_bytes: int = ImageLimits.MAX_BYTES):
        self._uploader = uploader
        self._max_bytes = max_bytes

    @property
    def uploader(self) -> AssetUploader:
        return self._uploader

    async def upload_entity_image(
        self,
        tenant_id: str,
        kind: str,
        entity_id: str,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> str | None:
        validate_image_file(content_type, len(content), self._max_bytes)
        folder = entity_folder(tenant_id, kind, entity_id)
        try:
            asset = await self._uploader.upload(
                folder,
                filename or "image",
                content,
                content_type,
                tags=[kind.rstrip("s"), tenant_id, entity_id],
            )
        except ExternalServiceError:
            # Already logged with the service context
            logger.warning(
                "Continuing without image after upload failure",
                tenant_id=tenant_id,
                kind=kind,
                entity_id=entity_id,
            )
            return None
        return asset.url

    async def remove_entity_image(self, tenant_id: str, kind: str, entity_id: str, url: str | None) -> None:
        if not url:
            return
        await self._uploader.remove(entity_folder(tenant_id, kind, entity_id), url)

    async def aclose(self) -> None:
        await self._uploader.aclose()


def create_uploader(settings: Settings) -> AssetUploader:
    if settings.imagekit_configured:
        return ImageKitUploader.from_settings(settings)
    logger.warning("ImageKit not configured; images are stored inline as data URLs")
    return InlineImageUploader()


__all__ = [
    "AssetUploader",
    "UploadedAsset",
    "InlineImageUploader",
    "ImageKitUploader",
    "MediaService",
    "create_uploader",
    "entity_folder",
    "validate_image_file",
    "optimized_image_url",
    "thumbnail_url",
    "sign_upload",
]
