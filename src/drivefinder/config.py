# Settings: typed configuration loaded from env + ~/.drivefinder/config.json.
# Created: 2026-10-19

from __future__ import annotations

import json
import logging
import os
import stat
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_HOME_ENV_VAR = "DRIVEFINDER_HOME"
_CONFIG_FILE_NAME = "config.json"


def get_config_dir() -> Path:
    """Get/create the drivefinder config directory (~/.drivefinder by default)."""
    override = os.environ.get(_HOME_ENV_VAR)
    d = Path(override).expanduser() if override else Path.home() / ".drivefinder"
    d.mkdir(parents=True, exist_ok=True)
    return d


def get_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILE_NAME


class Settings(BaseSettings):
    """drivefinder settings.

    Environment variables (``DRIVEFINDER_*``) win over values stored in
    ``config.json``.
    """

    model_config = SettingsConfigDict(env_prefix="DRIVEFINDER_", extra="ignore")

    # Microsoft identity platform / Graph
    graph_client_id: str | None = None
    graph_client_secret: str | None = None
    graph_tenant: str = "common"
    graph_redirect_uri: str = "http://localhost:8888/oauth/callback"
    graph_scopes: list[str] = Field(
        default_factory=lambda: ["offline_access", "User.Read", "Files.Read"]
    )
    graph_base_url: str = "https://graph.microsoft.com/v1.0"

    # HTTP
    request_timeout: float = 15.0

    # Search
    search_max_results: int = Field(default=200, ge=1, le=1000)

    # Thumbnails are disabled until Graph thumbnail fetches are reliable.
    thumbnails_enabled: bool = False
    thumbnail_stub_delay: float = 0.01

    log_level: str = "INFO"

    @classmethod
    def load(cls) -> Settings:
        """Load settings from the config file, with env vars taking priority."""
        file_values = _read_config_file(get_config_path())
        # pydantic-settings matches env names case-insensitively by default.
        env_names = {key.upper() for key in os.environ}
        env_keys = {
            name for name in cls.model_fields if f"DRIVEFINDER_{name.upper()}" in env_names
        }
        # Init kwargs beat env vars in pydantic-settings, so drop overridden keys.
        return cls(**{k: v for k, v in file_values.items() if k not in env_keys})

    def save(self) -> None:
        """Persist settings to config.json (owner read/write only)."""
        path = get_config_path()
        data = self.model_dump(mode="json")
        path.write_text(json.dumps(data, indent=2))
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
        logger.info("Saved settings to %s", path)


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", path)
        return {}
    return {k: v for k, v in data.items() if k in Settings.model_fields}


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings.load()
