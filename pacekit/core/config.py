"""Library configuration using Pydantic Settings.

Configuration is environment-aware:
- PACEKIT_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
PACEKIT_ENV = os.getenv("PACEKIT_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(PACEKIT_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (deployments may inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


def _build_memo_settings() -> "MemoSettings":
    """Build memoization settings from environment."""

    return MemoSettings()


class LogSettings(BaseSettings):
    """Logging output configuration used by configure_logging()."""

    level: str = Field(
        "INFO",
        description="Root log level name (DEBUG, INFO, WARNING, ...)",
    )
    format: str = Field(
        "json",
        description="Record format: 'json' for structured output or 'plain'",
    )
    output: str = Field(
        "stdout",
        description="Destination: 'stdout' or 'file'",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file' (defaults to logs/pacekit.log)",
    )
    max_bytes: int = Field(
        0,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        3,
        description="Number of rotated log files to keep",
        ge=0,
    )
    redact_payloads: bool = Field(
        True,
        description="Hide call arguments and results of wrapped functions in log output",
    )

    model_config = SettingsConfigDict(
        env_prefix="PACEKIT_LOG_",
        case_sensitive=False,
    )


class MemoSettings(BaseSettings):
    """Defaults applied by memoize() and memoize_async()."""

    default_max_size: int = Field(
        0,
        description="Cache bound used when max_size is not given (0 = unbounded)",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="PACEKIT_MEMO_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{PACEKIT_ENV} file.
    """

    env: str = PACEKIT_ENV
    log: LogSettings = Field(default_factory=_build_log_settings)
    memo: MemoSettings = Field(default_factory=_build_memo_settings)

    model_config = SettingsConfigDict(
        env_prefix="PACEKIT_",
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
