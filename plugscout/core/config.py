"""Runtime configuration for plugscout.

Settings are read from ``~/.plugscout.json`` when present and then
overridden by environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from plugscout import __version__
from plugscout.utils.log import get_logger


logger = get_logger()

CONFIG_FILE_NAME = ".plugscout.json"
DEFAULT_MAX_ARCHIVE_BYTES = 200 * 1024 * 1024

# Environment variable -> config field.
_ENV_OVERRIDES = {
    "PLUGSCOUT_TIMEOUT": "timeout_seconds",
    "PLUGSCOUT_USER_AGENT": "user_agent",
    "PLUGSCOUT_MAX_ARCHIVE_BYTES": "max_archive_bytes",
    "GITHUB_TOKEN": "github_token",
}


class DiscoveryConfig(BaseModel):
    """Settings that shape archive fetching."""

    timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = Field(default=f"plugscout/{__version__}")
    github_token: Optional[str] = None
    max_archive_bytes: int = Field(default=DEFAULT_MAX_ARCHIVE_BYTES, gt=0)

    @field_validator("github_token")
    @classmethod
    def _blank_token_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def request_headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers


def config_path(home: Optional[Path] = None) -> Path:
    return (home or Path.home()).expanduser() / CONFIG_FILE_NAME


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug("[config] Config file not found; using defaults", extra={"path": str(path)})
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
        logger.warning(
            "[config] Error loading config: %s: %s",
            type(exc).__name__,
            exc,
            extra={"path": str(path)},
        )
        return {}
    if not isinstance(data, dict):
        logger.warning("[config] Config root must be an object", extra={"path": str(path)})
        return {}
    return data


def load_config(
    home: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> DiscoveryConfig:
    """Load configuration from the home directory and environment."""
    env = os.environ if environ is None else environ
    path = config_path(home)
    data = _read_config_file(path)
    for env_var, field in _ENV_OVERRIDES.items():
        if env_var in env:
            data[field] = env[env_var]
    try:
        return DiscoveryConfig(**data)
    except ValidationError as exc:
        logger.warning(
            "[config] Invalid configuration; using defaults: %s",
            exc,
            extra={"path": str(path)},
        )
        return DiscoveryConfig()


__all__ = ["DiscoveryConfig", "config_path", "load_config"]
