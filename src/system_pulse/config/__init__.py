"""Unified configuration management for System Pulse.

Single source of truth for configuration: environment variables, .env files
and defaults.
"""

from system_pulse.config.env_loader import Environment, get_environment
from system_pulse.config.settings import AppConfig, get_settings, load_app_config, reset_settings

__all__ = [
    "AppConfig",
    "get_settings",
    "load_app_config",
    "reset_settings",
    "Environment",
    "get_environment",
]
