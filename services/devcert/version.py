"""
mkcert version tracking.

Compares the version recorded in the save directory against the latest
version a source reports, and flags major version jumps as breaking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from devcert.state.config import ToolConfig

_LEADING_DIGITS = re.compile(r"^\d+")


@dataclass(frozen=True)
class VersionComparison:
    current_version: str | None
    next_version: str
    should_update: bool
    breaking_change: bool


def parse_version(version: str) -> tuple[int, ...] | None:
    """Parse ``v1.4.4`` style strings into (1, 4, 4).

    Non-numeric suffixes (``1.4.4-rc1``) are ignored; missing components are
    zero. Returns None when there is no leading number at all.
    """
    text = version.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]

    parts: list[int] = []
    for component in text.split("."):
        match = _LEADING_DIGITS.match(component)
        if match is None:
            break
        parts.append(int(match.group()))

    if not parts:
        return None
    while len(parts) < 3:
        parts.append(0)
    return tuple(parts)


class VersionManager:
    def __init__(self, config: ToolConfig) -> None:
        self.config = config

    def compare(self, version: str) -> VersionComparison:
        current_version = self.config.version
        latest = parse_version(version)

        if latest is None:
            # Sources without version information (local) never trigger an update
            return VersionComparison(
                current_version=current_version,
                next_version=version,
                should_update=False,
                breaking_change=False,
            )

        current = parse_version(current_version) if current_version else None
        if current is None:
            return VersionComparison(
                current_version=current_version,
                next_version=version,
                should_update=True,
                breaking_change=False,
            )

        return VersionComparison(
            current_version=current_version,
            next_version=version,
            should_update=latest > current,
            breaking_change=latest[0] != current[0],
        )

    async def update(self, version: str) -> None:
        await self.config.update(version=version)
