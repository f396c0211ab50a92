import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from loguru import logger
from starlette.concurrency import run_in_threadpool

from vidtube.core.config import CloudinarySettings

_VERSION_SEGMENT = re.compile(r"^v\d+$")


class MediaGatewayError(Exception):
    pass


@dataclass
class UploadedMedia:
    url: str
    public_id: str
    resource_type: str
    duration: Optional[float] = None


def extract_public_id(url: str) -> Optional[str]:
    """Public id of a Cloudinary delivery URL, e.g. ``.../upload/v171/folder/abc.mp4`` -> ``folder/abc``."""
    if not url or "/upload/" not in url:
        return None
    path = url.split("/upload/", 1)[1].split("?", 1)[0]
    segments = [s for s in path.split("/") if s]
    if segments and _VERSION_SEGMENT.match(segments[0]):
        segments = segments[1:]
    if not segments:
        return None
    segments[-1] = segments[-1].rsplit(".", 1)[0]
    return "/".join(segments)


class MediaGateway:
    """Cloudinary uploader calls, run in the threadpool since the SDK is blocking."""

    def __init__(self, settings: CloudinarySettings):
        self.settings = settings
        self.options: Dict[str, Any] = {
            "cloud_name": settings.cloud_name,
            "api_key": settings.api_key,
            "api_secret": settings.api_secret,
            "upload_prefix": str(settings.api_url).rstrip("/"),
            "timeout": settings.timeout,
        }

    async def upload(self, local_path: Optional[str]) -> Optional[UploadedMedia]:
        if not local_path:
            return None

        options = dict(self.options, resource_type="auto")
        if self.settings.folder:
            options["folder"] = self.settings.folder

        name = Path(local_path).name
        try:
            data = await run_in_threadpool(cloudinary.uploader.upload, local_path, **options)
        except (CloudinaryError, OSError) as e:
            logger.error(f"Cloudinary upload of {name} failed: {e}")
            return None

        logger.info(f"Uploaded {name} as {data.get('public_id')}")
        return UploadedMedia(
            url=data.get("secure_url") or data["url"],
            public_id=data["public_id"],
            resource_type=data.get("resource_type", "image"),
            duration=data.get("duration"),
        )

    async def delete(self, url: str, kind: str = "image") -> bool:
        public_id = extract_public_id(url)
        if not public_id:
            return False

        try:
            data = await run_in_threadpool(
                cloudinary.uploader.destroy, public_id, resource_type=kind, **self.options
            )
        except CloudinaryError as e:
            raise MediaGatewayError(f"Failed to delete {public_id}: {e}") from e

        result = data.get("result")
        if result not in ("ok", "not found"):
            raise MediaGatewayError(f"Failed to delete {public_id}: {result}")

        logger.info(f"Deleted {kind} {public_id}: {result}")
        return result == "ok"


_gateway: Optional[MediaGateway] = None


def get_media_gateway() -> MediaGateway:
    global _gateway
    if _gateway is None:
        _gateway = MediaGateway(CloudinarySettings())
    return _gateway


async def discard_media(media: MediaGateway, url: Optional[str], kind: str = "image") -> None:
    # entity changes are already committed; blob cleanup is best-effort
    if not url:
        return
    try:
        await media.delete(url, kind)
    except MediaGatewayError as e:
        logger.error(f"Blob cleanup failed for {url}: {e}")
