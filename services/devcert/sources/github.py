"""GitHub releases source for the mkcert binary."""

import httpx

from devcert.config import GITHUB_API_URL
from devcert.logging_config import get_logger
from devcert.sources.platform_id import get_platform_identifier
from devcert.sources.protocol import SourceInfo

logger = get_logger(__name__)


class GithubSource:
    """Resolve mkcert from the latest GitHub release."""

    def __init__(
        self,
        api_url: str = GITHUB_API_URL,
        platform_identifier: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url
        self._platform_identifier = platform_identifier or get_platform_identifier()
        self._transport = transport

    async def get_source_info(self) -> SourceInfo | None:
        if self._platform_identifier is None:
            return None

        async with httpx.AsyncClient(
            follow_redirects=True, timeout=30.0, transport=self._transport
        ) as client:
            resp = await client.get(
                self._api_url,
                headers={
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
            )
            resp.raise_for_status()
            data = resp.json()

        version = data.get("tag_name")
        download_url = next(
            (
                asset.get("browser_download_url")
                for asset in data.get("assets", [])
                if self._platform_identifier in asset.get("name", "")
            ),
            None,
        )

        if not (version and download_url):
            logger.debug(
                "No mkcert release asset for platform",
                platform_identifier=self._platform_identifier,
                version=version,
            )
            return None

        return SourceInfo(download_url=download_url, version=version)
