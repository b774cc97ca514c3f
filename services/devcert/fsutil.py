"""
Async filesystem helpers.

Uses aiofiles for file content I/O; cheap metadata operations stay on
pathlib.
"""

from __future__ import annotations

import hashlib
import os
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

CHUNK_SIZE = 64 * 1024


async def exists(path: str | Path) -> bool:
    return await aiofiles.os.path.exists(path)


async def ensure_dir(path: str | Path) -> None:
    await aiofiles.os.makedirs(path, exist_ok=True)


async def read_file(path: str | Path) -> bytes:
    async with aiofiles.open(path, "rb") as f:
        return await f.read()


async def write_file_atomic(path: str | Path, data: bytes) -> None:
    """Write data to a sibling temp file, then replace the target.

    Readers see either the old content or the new content, never a torn write.
    """
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        async with aiofiles.open(tmp_path, "wb") as f:
            await f.write(data)
            await f.flush()
            os.fsync(f.fileno())
        await aiofiles.os.replace(tmp_path, path)
    except BaseException:
        if tmp_path.exists():
            await aiofiles.os.remove(tmp_path)
        raise


async def get_hash(path: str | Path) -> str | None:
    """SHA-256 hex digest of a file, or None if it does not exist."""
    if not await exists(path):
        return None

    digest = hashlib.sha256()
    async with aiofiles.open(path, "rb") as f:
        while chunk := await f.read(CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


async def copy_dir(source: str | Path, destination: str | Path) -> list[Path]:
    """Recursively copy the contents of source into destination.

    Existing files in destination are overwritten. Returns the copied paths.
    """
    source = Path(source)
    destination = Path(destination)
    copied: list[Path] = []

    await ensure_dir(destination)
    for entry in sorted(source.iterdir()):
        target = destination / entry.name
        if entry.is_dir():
            copied.extend(await copy_dir(entry, target))
        else:
            await write_file_atomic(target, await read_file(entry))
            os.chmod(target, entry.stat().st_mode & 0o777)
            copied.append(target)
    return copied
