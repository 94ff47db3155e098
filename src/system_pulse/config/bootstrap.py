"""Bootstrap configuration helpers (pre-settings).

The logger needs a level before the pydantic settings singleton can be
imported, so this module reads it straight from the environment.

Keep this module free of telemetry imports to avoid circular imports.
"""

from __future__ import annotations

import os

from system_pulse.config.validators import validate_log_level


def get_bootstrap_log_level(default: str = "INFO") -> str:
    """Get logging level from environment without importing settings.

    Args:
        default: Default log level if not set or invalid.

    Returns:
        Uppercased, validated log level string.
    """
    value = os.getenv("PULSE_LOG_LEVEL", default)
    try:
        return validate_log_level(value)
    except ValueError:
        return validate_log_level(default)
