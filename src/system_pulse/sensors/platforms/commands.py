"""External command runner for raw source readers.

All tool invocations (df, termux-battery-status, getprop) go through
run_command() so every call carries a timeout and failures map onto the
probe error taxonomy.
"""

import shutil
import subprocess

from system_pulse.sensors.types import SourceUnavailableError
from system_pulse.telemetry import COMMAND_FAILED, get_logger

log = get_logger(__name__)


def has_command(name: str) -> bool:
    """Check whether an executable is on PATH.

    Args:
        name: Executable name (e.g. "termux-battery-status").

    Returns:
        True if the command can be resolved.
    """
    return shutil.which(name) is not None


def run_command(args: list[str], timeout: float) -> str:
    """Run a command and return its stdout.

    Args:
        args: Command and arguments (no shell).
        timeout: Seconds before the process is killed.

    Returns:
        Captured stdout text.

    Raises:
        SourceUnavailableError: If the binary is missing, not executable, or
            exits non-zero.
        subprocess.TimeoutExpired: If the command exceeds ``timeout``.
    """
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        raise SourceUnavailableError(f"Command not found: {args[0]}") from None
    except PermissionError:
        raise SourceUnavailableError(f"Permission denied running {args[0]}") from None

    if result.returncode != 0:
        stderr_preview = (result.stderr or "").strip()[:200]
        log.debug(
            COMMAND_FAILED,
            command=args[0],
            returncode=result.returncode,
            stderr=stderr_preview or None,
        )
        detail = f": {stderr_preview}" if stderr_preview else ""
        raise SourceUnavailableError(
            f"'{' '.join(args)}' exited with status {result.returncode}{detail}"
        )

    return result.stdout
