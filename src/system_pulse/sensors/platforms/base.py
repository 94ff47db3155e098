"""Cross-platform raw readers using psutil.

These back the host, memory and server-metadata probes everywhere, and serve
as the generic fallback for cpu/disk/network on hosts without /proc or df.
"""

import os
import platform
import socket
import sys
import time
from typing import Any

import psutil


def load_average() -> tuple[float, float, float]:
    """1, 5 and 15 minute load averages (emulated by psutil on Windows)."""
    one, five, fifteen = psutil.getloadavg()
    return float(one), float(five), float(fifteen)


def cpu_times(percpu: bool = False) -> Any:
    """Cumulative CPU times in seconds (aggregate or one entry per core)."""
    return psutil.cpu_times(percpu=percpu)


def cpu_count() -> int:
    """Logical CPU count (0 if undeterminable)."""
    return psutil.cpu_count() or os.cpu_count() or 0


def cpu_speed_mhz() -> int:
    """Current CPU frequency in MHz, 0 where the platform hides it (Android)."""
    try:
        freq = psutil.cpu_freq()
    except (OSError, NotImplementedError):
        return 0
    return int(freq.current) if freq else 0


def cpu_model() -> str | None:
    """Processor description from the platform module, if any."""
    return platform.processor() or None


def virtual_memory() -> Any:
    return psutil.virtual_memory()


def disk_partitions() -> list[Any]:
    return list(psutil.disk_partitions(all=False))


def disk_usage(mountpoint: str) -> Any:
    return psutil.disk_usage(mountpoint)


def net_io_counters() -> dict[str, Any]:
    """Per-interface counters keyed by interface name."""
    return dict(psutil.net_io_counters(pernic=True))


def host_identity() -> dict[str, Any]:
    """Host facts used by the host probe."""
    return {
        "hostname": socket.gethostname(),
        "platform": sys.platform,
        "arch": platform.machine(),
        "release": platform.release(),
        "type": platform.system(),
        "uptime": int(time.time() - psutil.boot_time()),
        "python_version": platform.python_version(),
        "cpu_count": cpu_count(),
    }


def process_info() -> dict[str, Any]:
    """Facts about the serving process (server metadata)."""
    proc = psutil.Process(os.getpid())
    mem = proc.memory_info()
    return {
        "platform": sys.platform,
        "python_version": platform.python_version(),
        "uptime": round(time.time() - proc.create_time(), 3),
        "memory_usage": {"rss": mem.rss, "vms": mem.vms},
        "pid": proc.pid,
    }
