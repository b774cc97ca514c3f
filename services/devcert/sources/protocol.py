"""
Source provider protocol and types for devcert.

Defines the SourceProvider Protocol that every mkcert download source must
satisfy, along with the shared SourceInfo type and source exceptions.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from devcert.errors import DevcertError

# --- Data Types ---


@dataclass(frozen=True)
class SourceInfo:
    """Where to fetch mkcert for the current platform, and which version it is."""

    download_url: str
    version: str


# --- Exceptions ---


class SourceError(DevcertError):
    """Base exception for source provider failures."""


class UnsupportedPlatformError(SourceError):
    """Raised when a built-in source has no binary for this platform/arch."""

    def __init__(self, platform: str, arch: str, location: str) -> None:
        self.platform = platform
        self.arch = arch
        self.location = location
        super().__init__(
            f"Unsupported platform. Unable to find a binary file for {platform} "
            f"platform with {arch} arch on {location}"
        )


class InvalidSourceError(SourceError):
    """Raised when a custom source provider returns an unusable result."""

    def __init__(self, result: object) -> None:
        self.result = result
        super().__init__(
            f'Please check your custom "source", it seems to return invalid result: {result!r}'
        )


# --- Protocol ---


@runtime_checkable
class SourceProvider(Protocol):
    """Protocol defining an mkcert download source.

    Implementations must satisfy this interface structurally; no inheritance
    required. Returning None means no release asset matches this platform.
    """

    async def get_source_info(self) -> SourceInfo | None:
        """Resolve the download URL and version for the current platform."""
        ...
