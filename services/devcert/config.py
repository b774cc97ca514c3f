"""
Configuration management for devcert.

Settings are loaded from a YAML file (``$DEVCERT_CONFIG_FILE`` or
``./devcert.yaml``) and overridden by ``DEVCERT_*`` environment variables.
"""

import os
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SAVE_PATH = Path.home() / ".devcert"

GITHUB_API_URL = "https://api.github.com/repos/FiloSottile/mkcert/releases/latest"
GITHUB_RELEASES_URL = "https://github.com/FiloSottile/mkcert/releases"
CODING_API_URL = "https://e.coding.net/open-api"
CODING_PROJECT_ID = 8524617
CODING_REPOSITORY = "mkcert"
CODING_ARTIFACTS_URL = (
    "https://liuweigl.coding.net/p/github/artifacts?hash=8d4dd8949af543159c1b5ac71ff1ff72"
)


def config_file_path() -> Path:
    """Location of the YAML config file."""
    return Path(os.environ.get("DEVCERT_CONFIG_FILE", "devcert.yaml"))


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = config_file_path()
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


class SourceName(StrEnum):
    """Built-in mkcert download sources."""

    GITHUB = "github"
    CODING = "coding"
    LOCAL = "local"


# --- Source Configuration Models ---


class GithubSourceConfig(BaseModel):
    """GitHub releases source for the mkcert binary."""

    api_url: str = Field(
        default=GITHUB_API_URL,
        description="Releases API endpoint returning the latest release",
    )
    releases_url: str = Field(
        default=GITHUB_RELEASES_URL,
        description="Human-followable page listing release artifacts",
    )


class MirrorSourceConfig(BaseModel):
    """Coding artifact mirror for networks where GitHub is unreachable."""

    api_url: str = Field(default=CODING_API_URL)
    token: str = Field(default="", description="Coding access token (from env)")
    project_id: int = Field(default=CODING_PROJECT_ID)
    repository: str = Field(default=CODING_REPOSITORY)
    artifacts_url: str = Field(
        default=CODING_ARTIFACTS_URL,
        description="Human-followable page listing mirrored artifacts",
    )


class DownloadConfig(BaseModel):
    """Binary download behaviour."""

    timeout_seconds: float = Field(default=120.0)
    retries: int = Field(default=2, description="Connection-level retries")


# --- Main Settings ---


class Settings(BaseSettings):
    """Main devcert settings."""

    model_config = SettingsConfigDict(
        env_prefix="DEVCERT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False, description="JSON logging instead of console")

    # Certificate lifecycle
    force: bool = Field(default=False, description="Always regenerate the certificate")
    auto_upgrade: bool = Field(default=False, description="Upgrade mkcert when a release is out")
    source: SourceName = Field(default=SourceName.GITHUB)
    mkcert_path: Path | None = Field(
        default=None,
        description=(
            "Path to an existing mkcert binary, used instead of the managed copy "
            "and never upgraded; a missing path falls back to the managed binary"
        ),
    )
    save_path: Path = Field(default=DEFAULT_SAVE_PATH)
    key_file_name: str = Field(default="dev.pem")
    cert_file_name: str = Field(default="cert.pem")
    hosts: list[str] = Field(
        default_factory=list,
        description="Hosts added to the defaults (localhost and local IPv4 addresses)",
    )

    # Sources
    github: GithubSourceConfig = Field(default_factory=GithubSourceConfig)
    mirror: MirrorSourceConfig = Field(default_factory=MirrorSourceConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
