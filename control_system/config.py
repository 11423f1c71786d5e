"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - GITHUB_USER is required; its absence raises ConfigurationError before any loop starts
    - refresh_secs is always a positive integer (unparsable or < 1 falls back to 60)
    - reduced_motion is True only for "true" / "1" (case-insensitive)
    - get_settings() is cached (lru_cache), one instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Cache directory resolved lazily (cache_file) so importing config has no filesystem side effects
"""

import os
import sys
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from control_system.core.errors import ConfigurationError

APP_DIR_NAME = "control-system"
FALLBACK_CACHE_PATH = Path("./control-system-cache.json")
DEFAULT_REFRESH_SECS = 60


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True,
    )

    # GitHub
    github_token: str | None = None
    github_user: str
    github_api_url: str = "https://api.github.com"
    github_timeout_seconds: float = 10.0

    # Polling
    refresh_secs: int = Field(
        DEFAULT_REFRESH_SECS,
        validation_alias=_alias("CONTROL_SYSTEM_REFRESH_SECS", "refresh_secs"),
    )
    system_poll_secs: float = Field(
        2.0, gt=0,
        validation_alias=_alias("CONTROL_SYSTEM_SYSTEM_POLL_SECS", "system_poll_secs"),
    )

    # UI
    reduced_motion: bool = Field(
        False,
        validation_alias=_alias("CONTROL_SYSTEM_REDUCED_MOTION", "reduced_motion"),
    )
    target_fps: int = Field(
        30, ge=1, le=120,
        validation_alias=_alias("CONTROL_SYSTEM_TARGET_FPS", "target_fps"),
    )

    # Persistence
    cache_path: Path | None = Field(
        None, validation_alias=_alias("CONTROL_SYSTEM_CACHE_PATH", "cache_path"),
    )

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"

    @field_validator("github_token", mode="before")
    @classmethod
    def empty_token_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("refresh_secs", mode="before")
    @classmethod
    def parse_refresh_secs(cls, v):
        """Anything that is not a positive integer falls back to the default."""
        try:
            secs = int(str(v).strip())
        except (TypeError, ValueError):
            return DEFAULT_REFRESH_SECS
        return secs if secs >= 1 else DEFAULT_REFRESH_SECS

    @field_validator("reduced_motion", mode="before")
    @classmethod
    def parse_reduced_motion(cls, v):
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in ("true", "1")

    @property
    def has_token(self) -> bool:
        return self.github_token is not None

    @property
    def cache_file(self) -> Path:
        return self.cache_path or determine_cache_path()


def _platform_config_dir() -> Path | None:
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else None
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    try:
        return Path.home() / ".config"
    except RuntimeError:
        return None


def determine_cache_path() -> Path:
    """<config dir>/control-system/cache.json, or a relative fallback."""
    config_dir = _platform_config_dir()
    if config_dir is not None:
        app_dir = config_dir / APP_DIR_NAME
        try:
            app_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            return FALLBACK_CACHE_PATH
        return app_dir / "cache.json"
    return FALLBACK_CACHE_PATH


def load_settings(**overrides) -> Settings:
    """Build Settings, mapping validation failures to ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = [
            ".".join(str(p) for p in err["loc"])
            for err in e.errors() if err["type"] == "missing"
        ]
        if "github_user" in missing:
            raise ConfigurationError(
                "GITHUB_USER environment variable is required", "github_user",
            )
        raise ConfigurationError(f"Invalid configuration: {e}", "settings")


@lru_cache
def get_settings() -> Settings:
    return load_settings()
