"""Local source: mkcert is provided by other means and never fetched."""

from devcert.sources.protocol import SourceInfo


class LocalSource:
    """Always resolves to an empty SourceInfo, meaning "use what exists"."""

    async def get_source_info(self) -> SourceInfo | None:
        return SourceInfo(download_url="", version="")
