"""
Configuration management for foretell.

Uses Pydantic for type-safe, validated configuration with environment variable support.
"""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def _default_cache_dir() -> Path:
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    root = Path(xdg_cache) if xdg_cache else Path.home() / ".cache"
    return root / "foretell"


def _default_workers() -> int:
    return max(1, min(os.cpu_count() or 1, 32))


class ForetellSettings(BaseSettings):
    """Main configuration for foretell.

    Settings can be overridden via:
    1. Environment variables (prefixed with FORETELL_)
    2. .env file in the working directory
    3. Programmatic overrides

    Example:
        export FORETELL_MAX_WORKERS=4
        export FORETELL_LOG_LEVEL=DEBUG
    """

    # === Cache ===
    cache_dir: Path = Field(
        default_factory=_default_cache_dir,
        description="Directory holding the sets, cards and lock files",
    )

    # === Sync ===
    max_workers: int = Field(
        default_factory=_default_workers,
        ge=1,
        le=32,
        description="Number of sets downloaded concurrently during a sync pass",
    )
    release_grace_days: int = Field(
        default=7,
        ge=0,
        le=60,
        description="Sets releasing within this many days are already synced",
    )

    # === HTTP ===
    api_base: str = Field(
        default="https://api.scryfall.com", description="Scryfall API root"
    )
    user_agent: str = Field(default="foretell/1.0", description="User-Agent header")
    http_timeout: int = Field(
        default=30, ge=5, le=300, description="HTTP request timeout in seconds"
    )
    max_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for a failed API request",
    )
    retry_base_delay: float = Field(
        default=0.5,
        ge=0.1,
        le=10.0,
        description="Base delay for exponential backoff (seconds)",
    )
    request_interval: float = Field(
        default=0.1,
        ge=0.0,
        le=5.0,
        description="Minimum delay between API requests (seconds)",
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_rotation: str = Field(default="5 MB", description="Log file rotation size")
    log_retention: str = Field(
        default="10 days", description="Log file retention period"
    )
    log_to_file: bool = Field(default=True, description="Enable file logging")

    # === Notifications ===
    notifications_enabled: bool = Field(
        default=True, description="Send desktop notifications"
    )
    webhook_url: Optional[str] = Field(
        default=None,
        description="Webhook used when desktop notifications cannot be delivered",
    )

    # === Foreground ===
    picker_command: str = Field(default="dmenu", description="Picker executable")
    picker_prompt: str = Field(default="scry", description="Picker prompt")
    picker_lines: int = Field(
        default=30, ge=1, le=200, description="Lines shown by the picker"
    )
    viewers: list[str] = Field(
        default=["sxiv", "nsxiv", "xdg-open"],
        description="Image viewers tried in order",
    )
    viewer_geometry: str = Field(
        default="590x800", description="Window geometry passed to sxiv-like viewers"
    )

    @field_validator("cache_dir", mode="before")
    @classmethod
    def expand_cache_dir(cls, v):
        """Expand ~ in user-supplied cache paths."""
        if isinstance(v, str):
            v = Path(v)
        return v.expanduser()

    @property
    def sets_path(self) -> Path:
        return self.cache_dir / "sets"

    @property
    def cards_path(self) -> Path:
        return self.cache_dir / "cards"

    @property
    def lock_path(self) -> Path:
        return self.cache_dir / "lock"

    @property
    def logs_dir(self) -> Path:
        return self.cache_dir / "logs"

    model_config = {
        "env_prefix": "FORETELL_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Global settings instance
settings = ForetellSettings()


def reload_settings() -> ForetellSettings:
    """Reload settings from environment and .env file.

    Useful for testing or runtime configuration changes.
    """
    global settings
    settings = ForetellSettings()
    return settings
