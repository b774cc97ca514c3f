"""Persisted mkcert version for a save directory."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from devcert.state.document import JsonDocument

CONFIG_FILE_NAME = "config.json"


class ToolConfigData(BaseModel):
    version: str | None = None


class ToolConfig(JsonDocument[ToolConfigData]):
    """Last known mkcert version, stored in ``<save_path>/config.json``."""

    model = ToolConfigData

    @classmethod
    def for_save_path(cls, save_path: str | Path) -> ToolConfig:
        return cls(Path(save_path) / CONFIG_FILE_NAME)

    @property
    def version(self) -> str | None:
        return self.data.version
