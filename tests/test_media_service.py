import cloudinary.uploader
import pytest
from cloudinary.exceptions import Error as CloudinaryError

from vidtube.core.config import CloudinarySettings
from vidtube.services.media_service import (
    MediaGateway,
    MediaGatewayError,
    discard_media,
    extract_public_id,
)


@pytest.fixture
def gateway():
    return MediaGateway(CloudinarySettings())


class Recorded(list):
    pass


@pytest.fixture
def sdk(monkeypatch):
    recorded = Recorded()

    def patch(name, result=None, error=None):
        def fake(*args, **options):
            recorded.append((name, args, options))
            if error is not None:
                raise error
            return result

        monkeypatch.setattr(cloudinary.uploader, name, fake)

    recorded.patch = patch
    return recorded


@pytest.mark.parametrize(
    "url, public_id",
    [
        ("https://res.cloudinary.com/demo/video/upload/v1712345/vidtube/abc.mp4", "vidtube/abc"),
        ("https://res.cloudinary.com/demo/image/upload/sample.png", "sample"),
        ("http://res.cloudinary.com/demo/image/upload/v1/a/b/c.jpg?x=1", "a/b/c"),
        ("https://example.com/not-cloudinary.png", None),
        ("", None),
    ],
)
def test_extract_public_id(url, public_id):
    assert extract_public_id(url) == public_id


async def test_upload_returns_media_details(gateway, sdk, tmp_path):
    sdk.patch(
        "upload",
        result={
            "secure_url": "https://res.cloudinary.com/test-cloud/video/upload/v1/clip.mp4",
            "public_id": "clip",
            "resource_type": "video",
            "duration": 12.5,
        },
    )
    local = tmp_path / "clip.mp4"
    local.write_bytes(b"video-bytes")

    uploaded = await gateway.upload(str(local))

    [(name, args, options)] = sdk
    assert name == "upload"
    assert args == (str(local),)
    assert options["resource_type"] == "auto"
    assert options["cloud_name"] == "test-cloud"
    assert options["api_key"] == "test-key"
    assert options["api_secret"] == "test-secret"
    assert uploaded.url.endswith("/clip.mp4")
    assert uploaded.public_id == "clip"
    assert uploaded.resource_type == "video"
    assert uploaded.duration == 12.5


async def test_upload_failure_returns_none(gateway, sdk, tmp_path):
    sdk.patch("upload", error=CloudinaryError("Server returned unexpected status code - 500"))
    local = tmp_path / "avatar.png"
    local.write_bytes(b"png")

    assert await gateway.upload(str(local)) is None
    assert await gateway.upload(None) is None
    assert len(sdk) == 1


async def test_delete_sends_public_id_for_kind(gateway, sdk):
    sdk.patch("destroy", result={"result": "ok"})

    deleted = await gateway.delete(
        "https://res.cloudinary.com/test-cloud/video/upload/v99/vidtube/clip.mp4", "video"
    )

    assert deleted is True
    [(name, args, options)] = sdk
    assert name == "destroy"
    assert args == ("vidtube/clip",)
    assert options["resource_type"] == "video"
    assert options["cloud_name"] == "test-cloud"


async def test_delete_of_missing_blob_is_not_an_error(gateway, sdk):
    sdk.patch("destroy", result={"result": "not found"})
    assert await gateway.delete("https://res.cloudinary.com/c/image/upload/v1/gone.png") is False


async def test_delete_of_unparseable_url_skips_the_sdk(gateway, sdk):
    sdk.patch("destroy", result={"result": "ok"})
    assert await gateway.delete("https://example.com/pic.png") is False
    assert sdk == []


async def test_delete_failure_raises(gateway, sdk):
    sdk.patch("destroy", result={"result": "error"})
    with pytest.raises(MediaGatewayError):
        await gateway.delete("https://res.cloudinary.com/c/image/upload/v1/pic.png")


async def test_discard_media_swallows_gateway_errors(gateway, sdk):
    sdk.patch("destroy", error=CloudinaryError("Socket error"))
    await discard_media(gateway, "https://res.cloudinary.com/c/image/upload/v1/pic.png")
    await discard_media(gateway, None)
