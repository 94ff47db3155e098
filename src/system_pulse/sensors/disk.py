"""Disk usage probe.

Sources, picked once at construction:
- `DfDiskSource`: ``df -kP`` (POSIX output, 1 KiB blocks); its own
  Capacity column is the usage figure of record
- `PsutilDiskSource`: psutil partitions, for hosts without df

Pseudo filesystems (memory-backed, overlay, loop and kernel mounts) are
dropped by a fixed denylist whatever their reported usage.
"""

import math
import time
from typing import Protocol

from system_pulse.sensors.formatting import format_size
from system_pulse.sensors.models import DiskVolume
from system_pulse.sensors.platforms import base, commands
from system_pulse.sensors.probe import Clock, Probe
from system_pulse.sensors.types import SourceParseError
from system_pulse.telemetry import DF_ROW_SKIPPED, PROBE_STRATEGY_SELECTED, get_logger

log = get_logger(__name__)

DENIED_FILESYSTEM_PREFIXES = ("tmpfs", "devtmpfs", "udev", "overlay", "/dev/loop")
DENIED_MOUNTPOINT_PREFIXES = ("/snap/", "/sys", "/proc", "/run")

DF_BLOCK_SIZE = 1024


def is_denied(filesystem: str, mountpoint: str) -> bool:
    """True for pseudo filesystems that never appear in the disk table."""
    return filesystem.startswith(DENIED_FILESYSTEM_PREFIXES) or mountpoint.startswith(
        DENIED_MOUNTPOINT_PREFIXES
    )


def _parse_percent(column: str) -> int | None:
    value = column.rstrip("%")
    return int(value) if value.isdigit() else None


def make_volume(
    filesystem: str,
    mountpoint: str,
    size_bytes: int,
    used_bytes: int,
    available_bytes: int,
    usage_percent: int,
) -> DiskVolume:
    """Build a DiskVolume with its formatted presentation fields."""
    return DiskVolume(
        filesystem=filesystem,
        size=format_size(size_bytes),
        used=format_size(used_bytes),
        available=format_size(available_bytes),
        usage=f"{usage_percent}%",
        usage_percent=usage_percent,
        mountpoint=mountpoint,
        size_bytes=size_bytes,
        used_bytes=used_bytes,
        available_bytes=available_bytes,
    )


def parse_df_output(output: str) -> list[DiskVolume]:
    """Parse ``df -kP`` output.

    Rows with fewer than six columns or non-numeric sizes are skipped. The
    mountpoint is everything after the fifth column, so mountpoints with
    spaces survive.

    Raises:
        SourceParseError: If the output has no df header line.
    """
    lines = output.strip().splitlines()
    if not lines or not lines[0].lower().startswith("filesystem"):
        raise SourceParseError("Unrecognized df output (missing header)")

    volumes: list[DiskVolume] = []
    for line in lines[1:]:
        parts = line.split()
        if len(parts) < 6:
            continue

        filesystem, size, used, available, capacity = parts[:5]
        mountpoint = " ".join(parts[5:])
        if is_denied(filesystem, mountpoint):
            continue

        try:
            size_bytes = int(size) * DF_BLOCK_SIZE
            used_bytes = int(used) * DF_BLOCK_SIZE
            available_bytes = int(available) * DF_BLOCK_SIZE
        except ValueError:
            log.debug(DF_ROW_SKIPPED, filesystem=filesystem, mountpoint=mountpoint)
            continue

        usage_percent = _parse_percent(capacity)
        if usage_percent is None:
            # df rounds its Capacity column up.
            usage_percent = math.ceil(used_bytes / size_bytes * 100) if size_bytes > 0 else 0

        volumes.append(
            make_volume(
                filesystem, mountpoint, size_bytes, used_bytes, available_bytes, usage_percent
            )
        )

    return volumes


class DiskSource(Protocol):
    def read(self) -> list[DiskVolume]: ...


class DfDiskSource:
    """Volumes from ``df -kP``."""

    command = ["df", "-kP"]

    def __init__(self, timeout_seconds: float = 5.0) -> None:  # noqa: D107
        self.timeout_seconds = timeout_seconds

    def read(self) -> list[DiskVolume]:
        return parse_df_output(commands.run_command(self.command, timeout=self.timeout_seconds))


class PsutilDiskSource:
    """Volumes from psutil partitions (Windows and other hosts without df)."""

    def read(self) -> list[DiskVolume]:
        volumes: list[DiskVolume] = []
        for part in base.disk_partitions():
            if is_denied(part.device, part.mountpoint) or is_denied(part.fstype, part.mountpoint):
                continue
            try:
                usage = base.disk_usage(part.mountpoint)
            except OSError:
                # Empty card readers, unmounted optical drives.
                continue
            volumes.append(
                make_volume(
                    part.device,
                    part.mountpoint,
                    int(usage.total),
                    int(usage.used),
                    int(usage.free),
                    int(round(usage.percent)),
                )
            )
        return volumes


def select_disk_source(timeout_seconds: float = 5.0) -> DiskSource:
    """Prefer df where available, psutil otherwise."""
    if commands.has_command("df"):
        source: DiskSource = DfDiskSource(timeout_seconds=timeout_seconds)
    else:
        source = PsutilDiskSource()
    log.debug(PROBE_STRATEGY_SELECTED, probe="disk", source=type(source).__name__)
    return source


class DiskProbe(Probe[list[DiskVolume]]):
    """Mounted volumes with size, usage and mountpoint."""

    name = "disk"

    def __init__(
        self,
        ttl_seconds: float = 30.0,
        timeout_seconds: float = 5.0,
        source: DiskSource | None = None,
        clock: Clock = time.monotonic,
    ) -> None:  # noqa: D107
        # Outer bound leaves the subprocess its full timeout before giving up.
        super().__init__(ttl_seconds=ttl_seconds, timeout_seconds=timeout_seconds + 1, clock=clock)
        self.source = source if source is not None else select_disk_source(timeout_seconds)

    def read(self) -> list[DiskVolume]:
        return self.source.read()
