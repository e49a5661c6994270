"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class HttpConfig(BaseModel):
    timeout: float = Field(default=60.0, gt=0)  # seconds, read/write
    connect_timeout: float = Field(default=10.0, gt=0)
    verify_ssl: bool = True
    user_agent: str = "cloudwire/0.1.0"


class RetryConfig(BaseModel):
    max_attempts: int = Field(default=4, ge=1, le=20)  # Includes the first try
    base_backoff: float = Field(default=0.5, ge=0.0)  # seconds
    max_backoff: float = Field(default=20.0, ge=0.0)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level SDK settings.

    Loaded from TOML config files, overridden by environment variables
    (``CLOUDWIRE_REGION``, ``CLOUDWIRE_RETRY__MAX_ATTEMPTS``, ...).
    """

    region: str = "us-east-1"
    endpoint_url: str | None = None  # Overrides endpoint resolution

    # Static credentials; fall back to AWS_* env vars when unset
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None

    # Extra directories searched for <service>/<api-version>/service-2.json
    model_paths: list[str] = Field(default_factory=list)

    http: HttpConfig = Field(default_factory=HttpConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "CLOUDWIRE_", "env_nested_delimiter": "__"}

    def validate_region(self) -> None:
        """Reject region strings that cannot form a hostname."""
        if not self.endpoint_url and (
            not self.region or not all(c.isalnum() or c == "-" for c in self.region)
        ):
            raise ConfigError(f"Invalid region name: {self.region!r}")


def _read_toml(path: Path) -> dict[str, Any]:
    import tomli

    try:
        with open(path, "rb") as f:
            data = tomli.load(f)
    except tomli.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    # A shared project file keeps SDK settings under [cloudwire]
    if isinstance(data.get("cloudwire"), dict):
        return data["cloudwire"]
    return data


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: TOML file; defaults to ``$CLOUDWIRE_CONFIG_FILE``.
            A missing file is ignored.
        overrides: Values applied on top of the file (CLI flags).

    Raises:
        ConfigError: Unreadable TOML or an unusable region.
    """
    config_path = config_path or os.environ.get("CLOUDWIRE_CONFIG_FILE")
    data: dict[str, Any] = {}
    if config_path and Path(config_path).is_file():
        data = _read_toml(Path(config_path))
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})

    settings = Settings(**data)
    settings.validate_region()
    return settings
