"""
Tests for image upload: the ImageKit client, URL helpers and MediaService.
"""

import hashlib
import hmac
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from admin_api.services.media import (
    ImageKitUploader,
    InlineImageUploader,
    MediaService,
    UploadedAsset,
    create_uploader,
    entity_folder,
    optimized_image_url,
    sign_upload,
    thumbnail_url,
    validate_image_file,
)
from shared.config.settings import Settings
from shared.utils.exceptions import ExternalServiceError, InvalidImageError

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
IK_URL = "https://ik.imagekit.io/demo/users/u1/menu-items/m1/123_pic.png"


def make_uploader(handler) -> ImageKitUploader:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ImageKitUploader(
        public_key="public_abc",
        private_key="private_xyz",
        url_endpoint="https://ik.imagekit.io/demo",
        client=client,
        clock=lambda: 1700000000,
    )


class TestSignature:
    def test_signature_is_hmac_sha1_of_timestamp_and_public_key(self):
        expected = hmac.new(b"private_xyz", b"1700000000public_abc", hashlib.sha1).hexdigest()
        assert sign_upload(1700000000, "public_abc", "private_xyz") == expected


class TestImageKitUploader:
    @pytest.mark.asyncio
    async def test_upload_sends_signed_form_and_returns_url(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(200, json={"url": IK_URL, "fileId": "file_1"})

        uploader = make_uploader(handler)
        asset = await uploader.upload(
            "/users/u1/menu-items/m1/", "pic.png", PNG, "image/png", tags=["menu-item", "u1"]
        )
        await uploader.aclose()

        assert asset == UploadedAsset(url=IK_URL, file_id="file_1")
        assert seen["url"] == "https://upload.imagekit.io/api/v1/files/upload"
        body = seen["body"]
        assert b"1700000000_pic.png" in body
        assert b"/users/u1/menu-items/m1/" in body
        assert sign_upload(1700000000, "public_abc", "private_xyz").encode() in body
        assert b"menu-item,u1" in body

    @pytest.mark.asyncio
    async def test_rejected_upload_raises_bad_gateway(self):
        uploader = make_uploader(lambda request: httpx.Response(400, json={"message": "bad"}))

        with pytest.raises(ExternalServiceError) as exc_info:
            await uploader.upload("/f/", "pic.png", PNG, "image/png")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_unreachable_host_raises_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        uploader = make_uploader(handler)

        with pytest.raises(ExternalServiceError) as exc_info:
            await uploader.upload("/f/", "pic.png", PNG, "image/png")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_response_without_url_is_an_error(self):
        uploader = make_uploader(lambda request: httpx.Response(200, json={"fileId": "x"}))
        with pytest.raises(ExternalServiceError):
            await uploader.upload("/f/", "pic.png", PNG, "image/png")

    @pytest.mark.asyncio
    async def test_remove_deletes_matching_file(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path, request.url.params.get("path")))
            if request.method == "GET":
                return httpx.Response(
                    200,
                    content=json.dumps([
                        {"fileId": "keep", "url": "https://ik.imagekit.io/demo/other.png"},
                        {"fileId": "drop", "url": IK_URL},
                    ]),
                )
            return httpx.Response(204)

        uploader = make_uploader(handler)
        await uploader.remove("/users/u1/menu-items/m1/", IK_URL)

        assert calls == [
            ("GET", "/v1/files", "/users/u1/menu-items/m1/"),
            ("DELETE", "/v1/files/drop", None),
        ]

    @pytest.mark.asyncio
    async def test_remove_ignores_foreign_urls(self):
        handler = AsyncMock()
        uploader = make_uploader(handler)

        await uploader.remove("/f/", "data:image/png;base64,AAAA")
        await uploader.remove("/f/", "https://example.com/pic.png")

        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_failures_are_swallowed(self):
        uploader = make_uploader(lambda request: httpx.Response(500))
        await uploader.remove("/f/", IK_URL)


class TestUrlHelpers:
    def test_optimized_url_inserts_transformation(self):
        assert optimized_image_url(IK_URL, width=400, height=300) == (
            "https://ik.imagekit.io/tr:w-400,h-300,q-80,f-auto/demo/users/u1/menu-items/m1/123_pic.png"
        )

    def test_thumbnail(self):
        assert "tr:w-150,h-150,q-70,f-auto" in thumbnail_url(IK_URL)

    def test_other_urls_are_unchanged(self):
        assert optimized_image_url("https://cdn.example.com/a.png", width=10) == "https://cdn.example.com/a.png"


class TestValidateImageFile:
    @pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp", "IMAGE/PNG"])
    def test_accepted_types(self, content_type):
        validate_image_file(content_type, 1024)

    @pytest.mark.parametrize("content_type", ["image/gif", "application/pdf", None])
    def test_rejected_types(self, content_type):
        with pytest.raises(InvalidImageError):
            validate_image_file(content_type, 1024)

    def test_size_limit(self):
        validate_image_file("image/png", 5 * 1024 * 1024)
        with pytest.raises(InvalidImageError) as exc_info:
            validate_image_file("image/png", 5 * 1024 * 1024 + 1)
        assert "5MB" in exc_info.value.detail

    def test_empty_file(self):
        with pytest.raises(InvalidImageError):
            validate_image_file("image/png", 0)


class TestMediaService:
    def test_entity_folder(self):
        assert entity_folder("u1", "categories", "c1") == "/users/u1/categories/c1/"
        with pytest.raises(ValueError):
            entity_folder("u1", "profiles", "p1")

    @pytest.mark.asyncio
    async def test_inline_upload_returns_data_url(self):
        media = MediaService(InlineImageUploader())

        url = await media.upload_entity_image("u1", "menu-items", "m1", "pic.png", PNG, "image/png")

        assert url.startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_upload_failure_returns_none(self):
        uploader = AsyncMock()
        uploader.upload.side_effect = ExternalServiceError("ImageKit", is_unavailable=True)
        media = MediaService(uploader)

        assert await media.upload_entity_image("u1", "categories", "c1", "a.png", PNG, "image/png") is None

    @pytest.mark.asyncio
    async def test_invalid_file_is_rejected_before_upload(self):
        uploader = AsyncMock()
        media = MediaService(uploader)

        with pytest.raises(InvalidImageError):
            await media.upload_entity_image("u1", "categories", "c1", "a.gif", b"GIF89a", "image/gif")
        uploader.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_is_tagged_and_placed_in_entity_folder(self):
        uploader = AsyncMock()
        uploader.upload.return_value = UploadedAsset(url=IK_URL)
        media = MediaService(uploader)

        await media.upload_entity_image("u1", "menu-items", "m1", "pic.png", PNG, "image/png")

        args, kwargs = uploader.upload.call_args
        assert args[0] == "/users/u1/menu-items/m1/"
        assert kwargs["tags"] == ["menu-item", "u1", "m1"]

    @pytest.mark.asyncio
    async def test_remove_without_url_does_nothing(self):
        uploader = AsyncMock()
        await MediaService(uploader).remove_entity_image("u1", "categories", "c1", None)
        uploader.remove.assert_not_called()

    def test_create_uploader(self):
        assert isinstance(create_uploader(Settings(imagekit_public_key="")), InlineImageUploader)
        configured = Settings(
            imagekit_public_key="pub",
            imagekit_private_key="priv",
            imagekit_url_endpoint="https://ik.imagekit.io/demo",
        )
        assert isinstance(create_uploader(configured), ImageKitUploader)
