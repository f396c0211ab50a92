import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import UploadFile
from loguru import logger
from starlette.concurrency import run_in_threadpool

from vidtube.core.config import AppSettings

CHUNK_SIZE = 1024 * 1024


@asynccontextmanager
async def staged_upload(upload: Optional[UploadFile]) -> AsyncIterator[Optional[str]]:
    """Copy an incoming multipart file to a temporary path, removed on exit."""
    if upload is None or not upload.filename:
        yield None
        return

    suffix = Path(upload.filename).suffix
    fd, path = tempfile.mkstemp(prefix="vidtube-", suffix=suffix, dir=AppSettings().upload_temp_dir)
    try:
        with os.fdopen(fd, "wb") as buffer:
            await upload.seek(0)
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                await run_in_threadpool(buffer.write, chunk)
        logger.debug(f"Staged {upload.filename} at {path}")
        yield path
    finally:
        Path(path).unlink(missing_ok=True)
