"""
Binary downloader for mkcert.

Streams a release asset to disk. The destination only ever appears once the
download has completed; a failed download leaves nothing behind.
"""

from __future__ import annotations

import os
import stat
import sys
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os
import httpx

from devcert.logging_config import get_logger

logger = get_logger(__name__)


class Downloader:
    """Fetch a URL to a local file with httpx."""

    def __init__(
        self,
        timeout: float = 120.0,
        retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._retries = retries
        self._transport = transport

    @classmethod
    def create(cls, timeout: float = 120.0, retries: int = 2) -> Downloader:
        return cls(timeout=timeout, retries=retries)

    def _make_transport(self) -> httpx.AsyncBaseTransport:
        # Connection-level retries only; HTTP error responses are not retried
        return self._transport or httpx.AsyncHTTPTransport(retries=self._retries)

    async def download(self, url: str, destination: str | Path) -> None:
        destination = Path(destination)
        await aiofiles.os.makedirs(destination.parent, exist_ok=True)
        tmp_path = destination.with_name(f".{destination.name}.{uuid.uuid4().hex}.part")

        logger.info("Downloading", url=url, destination=str(destination))

        try:
            size = 0
            async with httpx.AsyncClient(
                follow_redirects=True, timeout=self._timeout, transport=self._make_transport()
            ) as client:
                async with client.stream("GET", url) as resp:
                    resp.raise_for_status()
                    async with aiofiles.open(tmp_path, "wb") as f:
                        async for chunk in resp.aiter_bytes():
                            await f.write(chunk)
                            size += len(chunk)

            if sys.platform != "win32":
                mode = tmp_path.stat().st_mode
                os.chmod(tmp_path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

            await aiofiles.os.replace(tmp_path, destination)
        except BaseException:
            if tmp_path.exists():
                await aiofiles.os.remove(tmp_path)
            raise

        logger.info("Download complete", destination=str(destination), size_bytes=size)
