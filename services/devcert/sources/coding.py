"""
Coding artifact mirror source for the mkcert binary.

For networks where GitHub is unreachable. The mirror keeps one generic
package per platform (``mkcert-<platform identifier>``) and is queried
through the Coding open API.
"""

from typing import Any

import httpx

from devcert.config import (
    CODING_API_URL,
    CODING_PROJECT_ID,
    CODING_REPOSITORY,
)
from devcert.logging_config import get_logger
from devcert.sources.platform_id import get_platform_identifier
from devcert.sources.protocol import SourceInfo

logger = get_logger(__name__)


class CodingSource:
    """Resolve mkcert from the Coding artifact mirror."""

    def __init__(
        self,
        api_url: str = CODING_API_URL,
        token: str = "",
        project_id: int = CODING_PROJECT_ID,
        repository: str = CODING_REPOSITORY,
        platform_identifier: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url
        self._token = token
        self._project_id = project_id
        self._repository = repository
        self._platform_identifier = platform_identifier or get_platform_identifier()
        self._transport = transport

    @property
    def package_name(self) -> str:
        return f"mkcert-{self._platform_identifier}"

    async def _call(self, client: httpx.AsyncClient, action: str, **params: Any) -> dict:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"token {self._token}"

        resp = await client.post(
            self._api_url,
            headers=headers,
            json={
                "Action": action,
                "ProjectId": self._project_id,
                "Repository": self._repository,
                "Package": self.package_name,
                **params,
            },
        )
        resp.raise_for_status()
        return (resp.json().get("Response") or {}).get("Data") or {}

    async def get_source_info(self) -> SourceInfo | None:
        if self._platform_identifier is None:
            return None

        async with httpx.AsyncClient(
            follow_redirects=True, timeout=30.0, transport=self._transport
        ) as client:
            versions = await self._call(client, "DescribeArtifactVersionList", PageSize=1)
            instances = versions.get("InstanceSet") or []
            version = instances[0].get("Version") if instances else None
            if not version:
                logger.debug("No mkcert version on mirror", package=self.package_name)
                return None

            properties = await self._call(
                client, "DescribeArtifactProperties", PackageVersion=version
            )

        download_url = next(
            (
                item.get("Value")
                for item in properties.get("InstanceSet") or []
                if item.get("Name") == "downloadUrl"
            ),
            None,
        )
        if not download_url:
            logger.debug(
                "Mirror package has no download URL", package=self.package_name, version=version
            )
            return None

        return SourceInfo(download_url=download_url, version=version)
