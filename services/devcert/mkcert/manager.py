"""
Certificate lifecycle manager.

Makes sure a usable mkcert binary exists (downloading or upgrading it when
needed), decides whether the development certificate has to be regenerated
for the requested hosts, and runs mkcert when it does. All state lives in the
save directory, so every invocation re-evaluates from the filesystem.
"""

from __future__ import annotations

import asyncio
import os
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import aiofiles.os

from devcert.config import DEFAULT_SAVE_PATH, Settings, SourceName
from devcert.config import settings as default_settings
from devcert.downloader import Downloader
from devcert.errors import DevcertError
from devcert.fsutil import copy_dir, ensure_dir, exists, get_hash, read_file
from devcert.logging_config import get_logger
from devcert.sources import (
    InvalidSourceError,
    SourceInfo,
    SourceType,
    UnsupportedPlatformError,
    create_source,
    source_location,
)
from devcert.sources.platform_id import current_arch, current_system
from devcert.state import CertificateHash, CertificateRecord, ToolConfig
from devcert.version import VersionManager

logger = get_logger(__name__)

CA_FILE_MARKER = "rootCA"


class BinaryOrigin(StrEnum):
    LOCAL = "local"
    MANAGED = "managed"


@dataclass(frozen=True)
class ToolBinary:
    """The mkcert executable in use.

    ``local`` binaries come from the mkcert_path option and are never replaced;
    ``managed`` binaries live in the save directory and are downloaded by us.
    """

    path: Path
    exists: bool
    origin: BinaryOrigin


@dataclass(frozen=True)
class Certificate:
    key: bytes
    cert: bytes


class CertificateGenerationError(DevcertError):
    """mkcert exited successfully but did not write both files."""

    def __init__(self, missing: Sequence[Path]) -> None:
        self.missing = list(missing)
        names = ", ".join(str(p) for p in self.missing)
        super().__init__(f"mkcert reported success but did not write: {names}")


async def exec_command(
    *args: str | Path, env: dict[str, str] | None = None
) -> tuple[bytes, bytes]:
    """Run a command to completion, raising CalledProcessError on a non-zero exit."""
    cmd = [str(arg) for arg in args]
    logger.debug("Exec", cmd=cmd)

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=env,
    )
    stdout, stderr = await proc.communicate()

    if proc.returncode != 0:
        raise subprocess.CalledProcessError(proc.returncode, cmd, output=stdout, stderr=stderr)
    return stdout, stderr


class Mkcert:
    """Keeps a development certificate for a set of hosts up to date."""

    def __init__(
        self,
        *,
        force: bool = False,
        auto_upgrade: bool = False,
        source: SourceType = SourceName.GITHUB,
        mkcert_path: str | Path | None = None,
        save_path: str | Path = DEFAULT_SAVE_PATH,
        key_file_name: str = "dev.pem",
        cert_file_name: str = "cert.pem",
        settings: Settings | None = None,
        downloader: Downloader | None = None,
    ) -> None:
        self.force = force
        self.auto_upgrade = auto_upgrade
        self.settings = settings or default_settings
        self.source_type = source
        self.source = create_source(source, self.settings)

        self.save_path = Path(save_path).expanduser().resolve()
        self.local_mkcert = Path(mkcert_path).expanduser() if mkcert_path else None
        self.saved_mkcert = self.save_path / ("mkcert.exe" if sys.platform == "win32" else "mkcert")
        self.key_file_path = self.save_path / key_file_name
        self.cert_file_path = self.save_path / cert_file_name

        self.config = ToolConfig.for_save_path(self.save_path)
        self.record = CertificateRecord.for_save_path(self.save_path)
        self.downloader = downloader or Downloader.create()

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides) -> Mkcert:
        """Build a manager from Settings; keyword overrides win."""
        settings = settings or default_settings
        options = {
            "force": settings.force,
            "auto_upgrade": settings.auto_upgrade,
            "source": settings.source,
            "mkcert_path": settings.mkcert_path,
            "save_path": settings.save_path,
            "key_file_name": settings.key_file_name,
            "cert_file_name": settings.cert_file_name,
            "downloader": Downloader.create(
                timeout=settings.download.timeout_seconds,
                retries=settings.download.retries,
            ),
        }
        options.update(overrides)
        return cls(settings=settings, **options)

    @property
    def is_local_source(self) -> bool:
        return isinstance(self.source_type, str) and self.source_type == SourceName.LOCAL

    # --- Binary management ---

    async def resolve_binary(self) -> ToolBinary:
        """Find the mkcert binary to use: mkcert_path first, then the managed copy."""
        if self.local_mkcert is not None:
            if await exists(self.local_mkcert):
                return ToolBinary(self.local_mkcert, True, BinaryOrigin.LOCAL)
            logger.error(
                "mkcert binary does not exist, please check the mkcert_path option",
                path=str(self.local_mkcert),
            )

        return ToolBinary(
            self.saved_mkcert, await exists(self.saved_mkcert), BinaryOrigin.MANAGED
        )

    async def init(self) -> None:
        """Prepare the save directory and make sure mkcert is available.

        Downloads mkcert if it is missing, or upgrades the managed copy when
        auto_upgrade is enabled.
        """
        await ensure_dir(self.save_path)
        await self.config.init()

        binary = await self.resolve_binary()

        if not binary.exists:
            await self._install_mkcert()
        elif self.auto_upgrade:
            await self._upgrade_mkcert(binary)

    async def _get_source_info(self) -> SourceInfo:
        source_info = await self.source.get_source_info()

        if isinstance(self.source_type, str):
            if source_info is None:
                raise UnsupportedPlatformError(
                    current_system(),
                    current_arch(),
                    source_location(self.source_type, self.settings),
                )
            return source_info

        if not isinstance(source_info, SourceInfo) or not source_info.download_url:
            raise InvalidSourceError(source_info)
        return source_info

    async def _install_mkcert(self) -> None:
        source_info = await self._get_source_info()

        if self.is_local_source:
            logger.warning(
                "mkcert does not exist and the source is local, nothing will be downloaded",
                expected_path=str(self.local_mkcert or self.saved_mkcert),
            )
            return

        logger.info("mkcert does not exist, downloading it now", version=source_info.version)
        await self.downloader.download(source_info.download_url, self.saved_mkcert)

        if source_info.version:
            await VersionManager(self.config).update(source_info.version)

    async def _upgrade_mkcert(self, binary: ToolBinary) -> None:
        if binary.origin is BinaryOrigin.LOCAL:
            logger.debug("mkcert comes from mkcert_path, upgrade skipped", path=str(binary.path))
            return

        version_manager = VersionManager(self.config)
        source_info = await self._get_source_info()
        comparison = version_manager.compare(source_info.version)

        if not comparison.should_update:
            logger.debug("mkcert is kept latest version, update skipped")
            return

        if comparison.breaking_change:
            logger.warning(
                "There may be some breaking changes in the latest mkcert, update skipped",
                current_version=comparison.current_version,
                latest_version=comparison.next_version,
            )
            return

        logger.info(
            "mkcert will be updated",
            current_version=comparison.current_version,
            latest_version=comparison.next_version,
        )
        await self.downloader.download(source_info.download_url, self.saved_mkcert)
        await version_manager.update(comparison.next_version)

    # --- Certificate authority ---

    async def check_ca_exists(self) -> bool:
        if not await exists(self.save_path):
            return False
        return any(CA_FILE_MARKER in name for name in await aiofiles.os.listdir(self.save_path))

    async def retain_existed_ca(self, binary: ToolBinary) -> None:
        """Import a CA that mkcert already installed elsewhere into the save directory.

        mkcert runs with CAROOT pinned to the save directory; without this a
        fresh CA would be minted there even if the user already trusts one.
        Lookup and copy failures are logged and generation carries on.
        """
        if await self.check_ca_exists():
            return

        try:
            stdout, _ = await exec_command(binary.path, "-CAROOT")
        except (subprocess.CalledProcessError, OSError) as e:
            logger.warning("Unable to locate the mkcert CA root, skipped", error=str(e))
            return

        caroot = stdout.decode().replace("\r", "").replace("\n", "")
        if not caroot:
            return

        ca_dir = Path(caroot).resolve()
        if ca_dir == self.save_path or not await exists(ca_dir):
            return

        try:
            copied = await copy_dir(ca_dir, self.save_path)
        except OSError as e:
            logger.warning(
                "Unable to import the existing CA, skipped", source=str(ca_dir), error=str(e)
            )
            return

        logger.info("Imported existing CA", source=str(ca_dir), files=len(copied))

    # --- Certificate ---

    def _mkcert_env(self) -> dict[str, str]:
        env = {**os.environ, "CAROOT": str(self.save_path)}
        # JAVA_HOME makes mkcert also target the Java trust store
        env.pop("JAVA_HOME", None)
        return env

    async def get_certificate(self) -> Certificate:
        return Certificate(
            key=await read_file(self.key_file_path),
            cert=await read_file(self.cert_file_path),
        )

    async def get_latest_hash(self) -> CertificateHash:
        return CertificateHash(
            key=await get_hash(self.key_file_path),
            cert=await get_hash(self.cert_file_path),
        )

    async def create_certificate(self, hosts: Sequence[str]) -> None:
        binary = await self.resolve_binary()
        if not binary.exists:
            logger.debug("mkcert does not exist, unable to generate certificate", hosts=hosts)

        await ensure_dir(self.save_path)
        await self.retain_existed_ca(binary)

        await exec_command(
            binary.path,
            "-install",
            "-key-file",
            self.key_file_path,
            "-cert-file",
            self.cert_file_path,
            *hosts,
            env=self._mkcert_env(),
        )

        missing = [p for p in (self.key_file_path, self.cert_file_path) if not await exists(p)]
        if missing:
            # Never leave half a certificate behind
            for path in (self.key_file_path, self.cert_file_path):
                if await exists(path):
                    await aiofiles.os.remove(path)
            raise CertificateGenerationError(missing)

        logger.info(
            "The list of generated files",
            key_file=str(self.key_file_path),
            cert_file=str(self.cert_file_path),
        )

    async def regenerate(self, hosts: Sequence[str]) -> None:
        await self.create_certificate(hosts)

        latest_hash = await self.get_latest_hash()
        await self.record.update(hosts=list(hosts), hash=latest_hash)

    async def renew(self, hosts: Sequence[str]) -> None:
        """Regenerate the certificate if forced, if hosts changed, or if files changed."""
        hosts = list(hosts)
        await ensure_dir(self.save_path)
        await self.record.init()

        if self.force:
            logger.debug("Certificate is forced to regenerate")
            await self.regenerate(hosts)
            return

        if not self.record.contains(hosts):
            logger.debug(
                "The hosts changed, start regenerate certificate",
                previous=self.record.hosts,
                requested=hosts,
            )
            await self.regenerate(hosts)
            return

        latest_hash = await self.get_latest_hash()
        if not self.record.equal(latest_hash):
            logger.debug(
                "The hash changed, start regenerate certificate",
                previous=self.record.hash.model_dump(),
                current=latest_hash.model_dump(),
            )
            await self.regenerate(hosts)
            return

        logger.debug("Neither hosts nor hash has changed, skip regenerate certificate")

    async def install(self, hosts: Sequence[str]) -> Certificate:
        """Get the certificate, renewing it first when hosts are given.

        With no hosts the cached files are returned as they are.
        """
        if hosts:
            await self.renew(hosts)

        return await self.get_certificate()
