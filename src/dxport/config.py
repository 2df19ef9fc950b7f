"""
dxport configuration (pydantic-settings).

Values are read, highest priority first, from:
    1. keyword arguments
    2. environment variables (``DX_`` prefix, e.g. ``DX_AUTH_TOKEN``)
    3. the ``dx_env.json`` settings file in ``$DX_USER_CONF_DIR``
       (default ``~/.dnanexus_config``)

Only the CLI layer reads or writes these settings. The transfer and
addressing core receives container and working path as plain arguments.

Usage:
    >>> from dxport.config import get_settings
    >>> settings = get_settings()
    >>> settings.project_context_id
    'project-...'
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from dxport.api.config import build_base_url

ENV_FILE_NAME = "dx_env.json"

# Keys persisted by save_context()
_CONTEXT_KEYS = ("cli_wd", "project_context_id", "project_context_name")


def get_config_dir() -> Path:
    """Directory holding the settings file."""
    conf_dir = os.environ.get("DX_USER_CONF_DIR")
    if conf_dir:
        return Path(conf_dir)
    return Path.home() / ".dnanexus_config"


def get_env_file() -> Path:
    """Path of the JSON settings file."""
    return get_config_dir() / ENV_FILE_NAME


class Settings(BaseSettings):
    """Client settings."""

    model_config = SettingsConfigDict(
        env_prefix="DX_",
        extra="ignore",
    )

    # API server
    apiserver_protocol: Literal["http", "https"] = "https"
    apiserver_host: str = "api.dnanexus.com"
    apiserver_port: int = Field(default=443, ge=1, le=65535)

    # Identity
    auth_token: str = ""
    auth_token_type: str = "Bearer"
    username: str = ""

    # Working context
    project_context_id: str = ""
    project_context_name: str = ""
    cli_wd: str = "/"

    # HTTP / transfer
    request_timeout: float = Field(default=30.0, ge=1.0, le=300.0)
    max_workers: int = Field(default=4, ge=1, le=32)
    part_retries: int = Field(default=0, ge=0, le=10)
    search_retries: int = Field(default=0, ge=0, le=10)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_json: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            JsonConfigSettingsSource(settings_cls, json_file=get_env_file()),
        )

    @property
    def api_base_url(self) -> str:
        """Base URL of the platform API."""
        return build_base_url(self.apiserver_protocol, self.apiserver_host, self.apiserver_port)

    @property
    def is_logged_in(self) -> bool:
        return bool(self.auth_token)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure_settings(**kwargs: Any) -> Settings:
    """Replace the singleton with settings built from explicit values."""
    global _settings
    _settings = Settings(**kwargs)
    return _settings


def reset_settings() -> None:
    """Drop the singleton so the next get_settings() re-reads all sources."""
    global _settings
    _settings = None


def save_context(settings: Settings, path: Path | None = None) -> Path:
    """
    Persist the working folder and project context to the settings file.

    Other keys already present in the file (credentials, server) are kept.

    Returns:
        Path of the written file.
    """
    path = path or get_env_file()
    data: dict[str, Any] = {}
    if path.is_file():
        data = json.loads(path.read_text())

    for key in _CONTEXT_KEYS:
        data[key] = getattr(settings, key)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


__all__ = [
    "Settings",
    "get_settings",
    "configure_settings",
    "reset_settings",
    "save_context",
    "get_config_dir",
    "get_env_file",
]
