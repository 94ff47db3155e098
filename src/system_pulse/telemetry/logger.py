"""Structured logging configuration using structlog.

Configures structlog on top of stdlib logging with:
- JSON formatter for the rotating file output
- Console output (pretty or JSON, per the log_format setting)
- UTC timestamps
- Component tracking derived from the logger name
"""

import logging
import logging.handlers
import pathlib
import sys
from datetime import datetime, timezone
from typing import Any

import structlog


def _get_log_level() -> str:
    """Get log level from the environment.

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    # Settings import logging; bootstrap avoids the cycle.
    from system_pulse.config.bootstrap import get_bootstrap_log_level  # noqa: PLC0415

    return get_bootstrap_log_level()


def _get_log_format() -> str:
    """Get console log format ("json" or "console") from settings."""
    try:
        from system_pulse.config.settings import get_settings  # noqa: PLC0415

        return get_settings().log_format
    except Exception:
        # Settings failed to load (e.g. invalid env); keep the console renderer.
        return "console"


def _get_log_dir() -> pathlib.Path:
    """Get log directory path.

    Returns:
        Path to the log directory.
    """
    try:
        from system_pulse.config.settings import get_settings  # noqa: PLC0415

        return pathlib.Path(str(get_settings().log_dir))
    except Exception:
        # Settings failed to load (e.g. invalid env); fall back to the repo default.
        project_root = pathlib.Path(__file__).parent.parent.parent.parent
        return project_root / "telemetry" / "logs"


def _add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add UTC timestamp to a foreign (stdlib) log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_component(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add component name (last dotted part of the logger name) to a log event.

    Works for both structlog events (logger name already in event_dict) and
    stdlib records routed through the foreign pre-chain.
    """
    logger_name = event_dict.get("logger") or getattr(logger, "name", "") or ""

    if "." in logger_name:
        component = logger_name.split(".")[-1]
    else:
        component = logger_name or "unknown"

    event_dict["component"] = component
    return event_dict


_FOREIGN_PRE_CHAIN: list[Any] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    _add_timestamp,
    _add_component,
]


def _configure_file_handler(log_dir: pathlib.Path) -> logging.handlers.RotatingFileHandler:
    """Configure rotating file handler for JSON logs.

    Args:
        log_dir: Directory for log files.

    Returns:
        Configured RotatingFileHandler writing ``current.jsonl``.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=str(log_dir / "current.jsonl"),
        maxBytes=100 * 1024 * 1024,  # 100 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_FOREIGN_PRE_CHAIN,
        )
    )
    return handler


def _configure_console_handler(log_format: str) -> logging.StreamHandler[Any]:
    """Configure console handler.

    Args:
        log_format: "console" for colored key/value output, "json" for JSON lines.

    Returns:
        Configured StreamHandler on stderr.
    """
    handler = logging.StreamHandler(sys.stderr)

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_FOREIGN_PRE_CHAIN,
        )
    )
    return handler


def configure_logging() -> None:
    """Configure structlog for structured logging.

    Call once at startup; get_logger() calls it lazily otherwise.
    """
    log_level = _get_log_level()
    configured_level = getattr(logging, log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Mark structlog configured before reading settings: settings loading
    # logs through get_logger() and would otherwise recurse.
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            _add_component,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_handler = _configure_console_handler(_get_log_format())
    console_handler.setLevel(configured_level)
    root_logger.addHandler(console_handler)

    try:
        file_handler = _configure_file_handler(_get_log_dir())
    except OSError as e:
        # Read-only install locations still get console logging.
        structlog.get_logger(__name__).warning(
            "log_file_unavailable", error=str(e), error_type=type(e).__name__
        )
    else:
        file_handler.setLevel(logging.INFO)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> Any:  # Returns structlog.stdlib.BoundLogger
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured structlog logger instance.

    Example:
        >>> from system_pulse.telemetry import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("probe_cache_miss", probe="disk", ttl_seconds=30.0)
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)
