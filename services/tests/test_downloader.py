"""
Tests for the mkcert binary downloader.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import httpx
import pytest

from devcert.downloader import Downloader

URL = "https://example.test/mkcert"
BINARY = b"\x7fELF" + b"\x00" * 4096


def _transport(status_code: int = 200, content: bytes = BINARY) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=content)

    return httpx.MockTransport(handler)


class FailingStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b"partial"
        raise httpx.ReadError("connection reset")


class TestDownloader:
    async def test_writes_destination(self, tmp_path: Path) -> None:
        destination = tmp_path / "mkcert"
        await Downloader(transport=_transport()).download(URL, destination)

        assert destination.read_bytes() == BINARY

    async def test_creates_parent_directories(self, tmp_path: Path) -> None:
        destination = tmp_path / "a" / "b" / "mkcert"
        await Downloader(transport=_transport()).download(URL, destination)

        assert destination.exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="no executable bit on Windows")
    async def test_marks_executable(self, tmp_path: Path) -> None:
        destination = tmp_path / "mkcert"
        await Downloader(transport=_transport()).download(URL, destination)

        assert os.access(destination, os.X_OK)

    async def test_replaces_existing_binary(self, tmp_path: Path) -> None:
        destination = tmp_path / "mkcert"
        destination.write_bytes(b"old")
        await Downloader(transport=_transport()).download(URL, destination)

        assert destination.read_bytes() == BINARY

    async def test_http_error_leaves_nothing(self, tmp_path: Path) -> None:
        destination = tmp_path / "mkcert"

        with pytest.raises(httpx.HTTPStatusError):
            await Downloader(transport=_transport(status_code=404)).download(
                "https://example.test/mkcert", destination
            )

        assert list(tmp_path.iterdir()) == []

    async def test_http_error_keeps_previous_binary(self, tmp_path: Path) -> None:
        destination = tmp_path / "mkcert"
        destination.write_bytes(b"old")

        with pytest.raises(httpx.HTTPStatusError):
            await Downloader(transport=_transport(status_code=502)).download(
                "https://example.test/mkcert", destination
            )

        assert destination.read_bytes() == b"old"
        assert [p.name for p in tmp_path.iterdir()] == ["mkcert"]

    async def test_interrupted_stream_leaves_nothing(self, tmp_path: Path) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, stream=FailingStream())
        )
        destination = tmp_path / "mkcert"

        with pytest.raises(httpx.ReadError):
            await Downloader(transport=transport).download(URL, destination)

        assert list(tmp_path.iterdir()) == []

    async def test_follows_redirects(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/latest":
                return httpx.Response(302, headers={"Location": "https://cdn.example.test/mkcert"})
            return httpx.Response(200, content=BINARY)

        destination = tmp_path / "mkcert"
        await Downloader(transport=httpx.MockTransport(handler)).download(
            "https://example.test/latest", destination
        )

        assert destination.read_bytes() == BINARY
