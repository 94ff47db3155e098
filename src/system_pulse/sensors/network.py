"""Network interface counters probe.

Sources, picked once at construction:
- `ProcNetDevSource`: /proc/net/dev (Linux, Android)
- `PsutilNetworkSource`: psutil per-NIC counters

Loopback interfaces and interfaces that have never received a byte are
left out.
"""

import re
import time
from pathlib import Path
from typing import Protocol

from system_pulse.sensors.formatting import format_bytes
from system_pulse.sensors.models import InterfaceStats, TrafficCounters, TrafficTotals
from system_pulse.sensors.platforms import base, procfs
from system_pulse.sensors.probe import Clock, Probe
from system_pulse.sensors.types import SourceParseError
from system_pulse.telemetry import PROBE_STRATEGY_SELECTED, get_logger

log = get_logger(__name__)

_LOOPBACK_RE = re.compile(r"^(lo\d*|loopback.*)$", re.IGNORECASE)

# /proc/net/dev column layout after "iface:"
_RX_COLUMNS = slice(0, 4)  # bytes packets errs drop
_TX_COLUMNS = slice(8, 12)  # bytes packets errs drop
_PROC_NET_DEV_COLUMNS = 16


def is_loopback(name: str) -> bool:
    return bool(_LOOPBACK_RE.match(name))


def build_interface_stats(rx: list[int], tx: list[int]) -> InterfaceStats:
    """Assemble rx/tx/total from ``[bytes, packets, errors, dropped]`` lists."""
    rx_bytes, rx_packets, rx_errors, rx_dropped = rx
    tx_bytes, tx_packets, tx_errors, tx_dropped = tx
    return InterfaceStats(
        rx=TrafficCounters(
            bytes=rx_bytes,
            bytes_formatted=format_bytes(rx_bytes),
            packets=rx_packets,
            errors=rx_errors,
            dropped=rx_dropped,
        ),
        tx=TrafficCounters(
            bytes=tx_bytes,
            bytes_formatted=format_bytes(tx_bytes),
            packets=tx_packets,
            errors=tx_errors,
            dropped=tx_dropped,
        ),
        total=TrafficTotals(
            bytes=rx_bytes + tx_bytes,
            bytes_formatted=format_bytes(rx_bytes + tx_bytes),
            packets=rx_packets + tx_packets,
        ),
    )


def parse_proc_net_dev(text: str) -> dict[str, InterfaceStats]:
    """Parse /proc/net/dev.

    The first two lines are headers. Large counters can touch the colon
    (``eth0:123456``), so each row is split on the first colon.

    Raises:
        SourceParseError: If the header is missing or a counter is non-numeric.
    """
    lines = text.strip().splitlines()
    if len(lines) < 2 or "|" not in lines[0]:
        raise SourceParseError("Unrecognized /proc/net/dev format (missing header)")

    interfaces: dict[str, InterfaceStats] = {}
    for line in lines[2:]:
        name, sep, counters = line.partition(":")
        if not sep:
            continue
        name = name.strip()
        columns = counters.split()
        if len(columns) < _PROC_NET_DEV_COLUMNS:
            continue

        try:
            values = [int(v) for v in columns[:_PROC_NET_DEV_COLUMNS]]
        except ValueError:
            raise SourceParseError(f"Non-numeric counter for interface {name}") from None

        if is_loopback(name) or values[0] == 0:
            continue

        interfaces[name] = build_interface_stats(values[_RX_COLUMNS], values[_TX_COLUMNS])

    return interfaces


class NetworkSource(Protocol):
    def read(self) -> dict[str, InterfaceStats]: ...


class ProcNetDevSource:
    """Counters from /proc/net/dev."""

    def __init__(self, path: Path = procfs.PROC_NET_DEV) -> None:  # noqa: D107
        self.path = path

    def read(self) -> dict[str, InterfaceStats]:
        return parse_proc_net_dev(procfs.read_text(self.path))


class PsutilNetworkSource:
    """Counters from psutil.net_io_counters(pernic=True)."""

    def read(self) -> dict[str, InterfaceStats]:
        interfaces: dict[str, InterfaceStats] = {}
        for name, c in sorted(base.net_io_counters().items()):
            if is_loopback(name) or c.bytes_recv == 0:
                continue
            interfaces[name] = build_interface_stats(
                [c.bytes_recv, c.packets_recv, c.errin, c.dropin],
                [c.bytes_sent, c.packets_sent, c.errout, c.dropout],
            )
        return interfaces


def select_network_source() -> NetworkSource:
    if procfs.is_available(procfs.PROC_NET_DEV):
        source: NetworkSource = ProcNetDevSource()
    else:
        source = PsutilNetworkSource()
    log.debug(PROBE_STRATEGY_SELECTED, probe="network", source=type(source).__name__)
    return source


class NetworkProbe(Probe[dict[str, InterfaceStats]]):
    """Per-interface rx/tx counters keyed by interface name."""

    name = "network"

    def __init__(
        self,
        ttl_seconds: float = 2.0,
        timeout_seconds: float = 2.0,
        source: NetworkSource | None = None,
        clock: Clock = time.monotonic,
    ) -> None:  # noqa: D107
        super().__init__(ttl_seconds=ttl_seconds, timeout_seconds=timeout_seconds, clock=clock)
        self.source = source if source is not None else select_network_source()

    def read(self) -> dict[str, InterfaceStats]:
        return self.source.read()
