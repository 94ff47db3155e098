"""Readers for the /proc and /sys virtual filesystem trees (Linux, Android)."""

from pathlib import Path

from system_pulse.sensors.types import SourceUnavailableError

PROC_STAT = Path("/proc/stat")
PROC_NET_DEV = Path("/proc/net/dev")
PROC_CPUINFO = Path("/proc/cpuinfo")
PROC_VERSION = Path("/proc/version")
SYS_THERMAL = Path("/sys/class/thermal")

# Keys that carry the CPU name: x86 uses "model name", ARM kernels
# "Hardware" or "Processor".
_CPU_MODEL_KEYS = ("model name", "Hardware", "Processor")


def read_text(path: Path) -> str:
    """Read a virtual file in full.

    Raises:
        SourceUnavailableError: If the file is missing or unreadable.
    """
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        raise SourceUnavailableError(f"{path} not found") from None
    except PermissionError:
        raise SourceUnavailableError(f"Permission denied reading {path}") from None


def is_available(path: Path) -> bool:
    """True if a virtual file exists (used for strategy selection)."""
    return path.exists()


def read_cpu_model(path: Path = PROC_CPUINFO) -> str | None:
    """First CPU model string from /proc/cpuinfo, or None if not exposed."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None

    for key in _CPU_MODEL_KEYS:
        for line in text.splitlines():
            name, sep, value = line.partition(":")
            if sep and name.strip() == key and value.strip():
                return value.strip()
    return None


def read_kernel_version(path: Path = PROC_VERSION) -> str | None:
    """Kernel banner from /proc/version, or None if unreadable."""
    try:
        return path.read_text(encoding="utf-8", errors="replace").strip() or None
    except OSError:
        return None


def list_thermal_zones(root: Path = SYS_THERMAL) -> list[Path]:
    """thermal_zone* directories under root, in numeric order.

    Returns:
        Zone directories; empty if root does not exist.
    """
    if not root.is_dir():
        return []

    def _zone_index(p: Path) -> tuple[int, str]:
        suffix = p.name[len("thermal_zone") :]
        return (int(suffix), p.name) if suffix.isdigit() else (1 << 30, p.name)

    zones = [p for p in root.iterdir() if p.name.startswith("thermal_zone")]
    return sorted(zones, key=_zone_index)
