"""
ImageKit.io upload client (httpx).

Uploads are signed with HMAC-SHA1 over ``timestamp + publicKey`` keyed by the
private key. Deletion goes through the management API: the files in the
entity's folder are listed and the one whose URL matches is removed.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Callable

import httpx

from shared.config.constants import ImageLimits
from shared.config.logging import get_logger
from shared.config.settings import Settings
from shared.utils.exceptions import ExternalServiceError
from .uploader import UploadedAsset

logger = get_logger(__name__)

IMAGEKIT_HOST = "ik.imagekit.io"


def sign_upload(timestamp: int, public_key: str, private_key: str) -> str:
    """Hex HMAC-SHA1 of ``f"{timestamp}{public_key}"`` keyed by the private key."""
    token = f"{timestamp}{public_key}"
    return hmac.new(private_key.encode(), token.encode(), hashlib.sha1).hexdigest()


class ImageKitUploader:
    """AssetUploader backed by ImageKit.io."""

    def __init__(
        self,
        public_key: str,
        private_key: str,
        url_endpoint: str,
        upload_url: str = "https://upload.imagekit.io/api/v1/files/upload",
        api_url: str = "https://api.imagekit.io/v1",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._public_key = public_key
        self._private_key = private_key
        self._url_endpoint = url_endpoint.rstrip("/")
        self._upload_url = upload_url
        self._api_url = api_url.rstrip("/")
        self._clock = clock
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        )

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None) -> ImageKitUploader:
        return cls(
            public_key=settings.imagekit_public_key,
            private_key=settings.imagekit_private_key,
            url_endpoint=settings.imagekit_url_endpoint,
            upload_url=settings.imagekit_upload_url,
            api_url=settings.imagekit_api_url,
            timeout=settings.imagekit_timeout,
            client=client,
        )

    async def upload(
        self,
        folder: str,
        filename: str,
        content: bytes,
        content_type: str,
        tags: list[str] | None = None,
    ) -> UploadedAsset:
        """
        Upload a file into ``folder``.

        Raises:
            ExternalServiceError: ImageKit rejected the upload or could not be reached.
        """
        timestamp = int(self._clock())
        form = {
            "fileName": f"{timestamp}_{filename}",
            "folder": folder,
            "useUniqueFileName": "true",
            "publicKey": self._public_key,
            "timestamp": str(timestamp),
            "signature": sign_upload(timestamp, self._public_key, self._private_key),
        }
        if tags:
            form["tags"] = ",".join(tags)

        try:
            response = await self._client.post(
                self._upload_url,
                data=form,
                files={"file": (filename, content, content_type)},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                "ImageKit",
                status=e.response.status_code,
                body=e.response.text[:500],
                folder=folder,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ExternalServiceError("ImageKit", is_unavailable=True, error=str(e), folder=folder) from e

        url = payload.get("url")
        if not url:
            raise ExternalServiceError("ImageKit", error="upload response has no url", folder=folder)

        logger.info("Image uploaded", folder=folder, file_id=payload.get("fileId"))
        return UploadedAsset(url=url, file_id=payload.get("fileId"))

    async def remove(self, folder: str, url: str) -> None:
        """Delete the file at ``url`` if it lives in ``folder``. Failures are only logged."""
        if not url or IMAGEKIT_HOST not in url:
            return
        auth = (self._private_key, "")
        try:
            response = await self._client.get(
                f"{self._api_url}/files",
                params={"path": folder},
                auth=auth,
            )
            response.raise_for_status()
            file_ids = [f["fileId"] for f in response.json() if f.get("url") == url and "fileId" in f]
            for file_id in file_ids:
                deleted = await self._client.delete(f"{self._api_url}/files/{file_id}", auth=auth)
                deleted.raise_for_status()
            logger.info("Image removed", folder=folder, removed=len(file_ids))
        except (httpx.HTTPError, ValueError, TypeError, KeyError) as e:
            logger.warning("Image removal failed", folder=folder, error=str(e))

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()


# =============================================================================
# URL transformations
# =============================================================================


def optimized_image_url(
    url: str,
    width: int | None = None,
    height: int | None = None,
    quality: int = ImageLimits.DEFAULT_QUALITY,
) -> str:
    """
    ImageKit URL with resize/quality/auto-format transformations applied.
    Non-ImageKit URLs are returned unchanged.
    """
    if IMAGEKIT_HOST not in url:
        return url

    transformations = []
    if width:
        transformations.append(f"w-{width}")
    if height:
        transformations.append(f"h-{height}")
    transformations.append(f"q-{quality}")
    transformations.append("f-auto")

    return url.replace(f"{IMAGEKIT_HOST}/", f"{IMAGEKIT_HOST}/tr:{','.join(transformations)}/", 1)


def thumbnail_url(url: str, size: int = ImageLimits.THUMBNAIL_SIZE) -> str:
    return optimized_image_url(url, size, size, quality=70)
