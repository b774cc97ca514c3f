"""
mkcert download sources.

Provides create_source() to build a SourceProvider from a built-in source
name, or pass through a custom provider unchanged.
"""

from __future__ import annotations

from devcert.config import Settings, SourceName
from devcert.config import settings as default_settings
from devcert.sources.protocol import (
    InvalidSourceError,
    SourceError,
    SourceInfo,
    SourceProvider,
    UnsupportedPlatformError,
)

SourceType = str | SourceProvider

__all__ = [
    "InvalidSourceError",
    "SourceError",
    "SourceInfo",
    "SourceProvider",
    "SourceType",
    "UnsupportedPlatformError",
    "create_source",
    "source_location",
]


def create_source(source: SourceType, settings: Settings | None = None) -> SourceProvider:
    """Build the provider for a source name, or return a custom provider as-is."""
    if not isinstance(source, str):
        if not isinstance(source, SourceProvider):
            raise TypeError(f"source must be a source name or a SourceProvider, got {source!r}")
        return source

    settings = settings or default_settings

    match SourceName(source):
        case SourceName.GITHUB:
            from devcert.sources.github import GithubSource

            return GithubSource(
                api_url=settings.github.api_url,
            )

        case SourceName.CODING:
            from devcert.sources.coding import CodingSource

            return CodingSource(
                api_url=settings.mirror.api_url,
                token=settings.mirror.token,
                project_id=settings.mirror.project_id,
                repository=settings.mirror.repository,
            )

        case SourceName.LOCAL:
            from devcert.sources.local import LocalSource

            return LocalSource()


def source_location(source: SourceType, settings: Settings | None = None) -> str:
    """Human-followable place to fetch mkcert by hand for a source."""
    if not isinstance(source, str):
        return "the custom source"

    settings = settings or default_settings

    match SourceName(source):
        case SourceName.GITHUB:
            return settings.github.releases_url
        case SourceName.CODING:
            return settings.mirror.artifacts_url
        case SourceName.LOCAL:
            return "the local filesystem"
