"""Custom Pydantic validators for configuration.

Shared by AppConfig field validators and the pre-settings bootstrap helpers.
"""

from pathlib import Path

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
VALID_LOG_FORMATS = {"json", "console"}


def validate_log_level(value: str) -> str:
    """Validate log level is one of the standard levels.

    Args:
        value: Log level string.

    Returns:
        Uppercased log level.

    Raises:
        ValueError: If log level is not valid.
    """
    if value.upper() not in VALID_LOG_LEVELS:
        raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}, got {value}")
    return value.upper()


def validate_log_format(value: str) -> str:
    """Validate log format is 'json' or 'console'.

    Args:
        value: Log format string.

    Returns:
        Lowercased log format.

    Raises:
        ValueError: If log format is not valid.
    """
    if value.lower() not in VALID_LOG_FORMATS:
        raise ValueError(f"log_format must be one of {VALID_LOG_FORMATS}, got {value}")
    return value.lower()


def validate_auth_token(value: str | None) -> str | None:
    """Normalize the optional bearer token.

    Blank values (e.g. ``PULSE_AUTH_TOKEN=`` in a .env file) disable auth
    instead of requiring an empty token.

    Args:
        value: Raw token value.

    Returns:
        Stripped token, or None when unset or blank.

    Raises:
        ValueError: If the token contains whitespace.
    """
    if value is None:
        return None
    token = value.strip()
    if not token:
        return None
    if any(ch.isspace() for ch in token):
        raise ValueError("auth_token must not contain whitespace")
    return token


def resolve_path(value: Path | str) -> Path:
    """Resolve relative paths against the project root.

    Args:
        value: Path value (string or Path).

    Returns:
        Absolute, resolved Path.
    """
    path = Path(value) if isinstance(value, str) else value

    if not path.is_absolute():
        # src/system_pulse/config -> project root
        project_root = Path(__file__).parent.parent.parent.parent
        path = (project_root / path).resolve()
    else:
        path = path.resolve()

    return path
