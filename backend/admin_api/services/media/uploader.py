"""
Image/asset upload collaborator.

AssetUploader is the boundary to whatever hosts images. ImageKitUploader
(imagekit.py) is the production implementation; InlineImageUploader keeps
images inside the document as data URLs when no host is configured.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Protocol

from shared.config.constants import ImageLimits
from shared.config.logging import get_logger
from shared.utils.exceptions import InvalidImageError

logger = get_logger(__name__)


@dataclass(frozen=True)
class UploadedAsset:
    url: str
    file_id: str | None = None


class AssetUploader(Protocol):
    async def upload(
        self,
        folder: str,
        filename: str,
        content: bytes,
        content_type: str,
        tags: list[str] | None = None,
    ) -> UploadedAsset:
        """Store the file and return its public URL. Raises ExternalServiceError."""
        ...

    async def remove(self, folder: str, url: str) -> None:
        """Best-effort delete; never raises."""
        ...

    async def aclose(self) -> None:
        ...


class InlineImageUploader:
    """Encodes images as ``data:`` URLs stored directly on the document."""

    async def upload(
        self,
        folder: str,
        filename: str,
        content: bytes,
        content_type: str,
        tags: list[str] | None = None,
    ) -> UploadedAsset:
        encoded = base64.b64encode(content).decode("ascii")
        return UploadedAsset(url=f"data:{content_type};base64,{encoded}")

    async def remove(self, folder: str, url: str) -> None:
        # Nothing is stored outside the document
        return None

    async def aclose(self) -> None:
        return None


def validate_image_file(content_type: str | None, size: int, max_bytes: int = ImageLimits.MAX_BYTES) -> None:
    """
    Accept JPEG, PNG and WebP files up to ``max_bytes``.

    Raises:
        InvalidImageError: The file type or size is not accepted.
    """
    if (content_type or "").lower() not in ImageLimits.ALLOWED_CONTENT_TYPES:
        raise InvalidImageError(
            "Please select a valid image file (JPEG, PNG, or WebP)",
            content_type=content_type,
        )
    if size <= 0:
        raise InvalidImageError("The file is empty", size=size)
    if size > max_bytes:
        raise InvalidImageError(
            f"Image size must be less than {max_bytes // (1024 * 1024)}MB",
            size=size,
        )
