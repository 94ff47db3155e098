"""Application configuration settings.

This module provides the AppConfig class and settings singleton.
"""

from pathlib import Path

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from system_pulse.config.env_loader import Environment, get_environment, load_env_files
from system_pulse.config.validators import (
    resolve_path,
    validate_auth_token,
    validate_log_format,
    validate_log_level,
)

log = structlog.get_logger(__name__)


class AppConfig(BaseSettings):
    """Unified application configuration.

    Values come from PULSE_* environment variables (after .env loading) and
    fall back to the defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="PULSE_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    environment: Environment = Field(
        default_factory=get_environment, description="Current environment"
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # Application
    project_name: str = Field(default="System Pulse", description="Project name")
    version: str = Field(default="0.1.0", description="Application version")

    # Telemetry
    log_dir: Path = Field(default=Path("telemetry/logs"), description="Log directory path")
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="console", description="Console log format (console or json); files are JSON"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("log_dir", mode="before")
    @classmethod
    def resolve_paths(cls, v: Path | str) -> Path:
        """Resolve relative paths to absolute."""
        return resolve_path(v)

    # Service
    service_host: str = Field(default="0.0.0.0", description="Service host address")
    service_port: int = Field(default=3001, ge=1, le=65535, description="Service port number")
    service_url: str = Field(
        default="http://localhost:3001", description="Base URL used by the CLI --remote mode"
    )
    auth_token: str | None = Field(
        default=None, description="Bearer token required on /api routes (unset disables auth)"
    )
    enable_cors: bool = Field(default=False, description="Allow cross-origin dashboard requests")

    @field_validator("auth_token", mode="before")
    @classmethod
    def normalize_auth_token(cls, v: str | None) -> str | None:
        """Treat blank tokens as unset."""
        return validate_auth_token(v)

    # Probe cache lifetimes
    host_ttl_seconds: float = Field(default=5.0, ge=0, description="Host info cache TTL")
    memory_ttl_seconds: float = Field(default=1.0, ge=0, description="Memory cache TTL")
    cpu_ttl_seconds: float = Field(default=5.0, ge=0, description="CPU usage cache TTL")
    disk_ttl_seconds: float = Field(
        default=30.0, ge=0, description="Disk usage cache TTL (df is comparatively expensive)"
    )
    network_ttl_seconds: float = Field(default=2.0, ge=0, description="Network counters cache TTL")
    android_ttl_seconds: float = Field(
        default=5.0, ge=0, description="Android battery/thermal/device cache TTL"
    )

    # External call bounds
    command_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Timeout for df / termux-battery-status"
    )
    getprop_timeout_seconds: float = Field(
        default=2.0, gt=0, description="Timeout for each getprop invocation"
    )
    file_read_timeout_seconds: float = Field(
        default=2.0, gt=0, description="Timeout for /proc and /sys reads"
    )


_settings: AppConfig | None = None


def load_app_config() -> AppConfig:
    """Load and validate application configuration.

    Returns:
        Validated AppConfig instance.

    Raises:
        ValidationError: If configuration validation fails.
    """
    log.info("loading_app_config", environment=get_environment().value)

    load_env_files()

    try:
        config = AppConfig()
        log.info(
            "app_config_loaded",
            environment=config.environment.value,
            debug=config.debug,
            log_level=config.log_level,
            auth_enabled=config.auth_token is not None,
        )
        return config
    except Exception as e:
        log.error("app_config_load_failed", error=str(e), error_type=type(e).__name__)
        raise


def get_settings() -> AppConfig:
    """Get the application settings singleton.

    Returns:
        AppConfig instance.
    """
    global _settings
    if _settings is None:
        _settings = load_app_config()
    return _settings


def reset_settings() -> None:
    """Drop the cached singleton so the next get_settings() reloads."""
    global _settings
    _settings = None
