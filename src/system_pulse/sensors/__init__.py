"""Metric-domain probes.

Each probe owns one domain and its own TTL cache, and answers ``fetch()``
with a ProbeResult instead of raising.

Structure:
- probe.py: Probe base class (cache, timeout, failure conversion)
- host.py, memory.py, cpu.py, disk.py, network.py, android.py: domain probes
- platforms/: raw source readers (psutil, /proc and /sys, subprocesses)
"""

from system_pulse.sensors.android import AndroidProbe
from system_pulse.sensors.cpu import CpuDeltaTracker, CpuProbe
from system_pulse.sensors.disk import DiskProbe
from system_pulse.sensors.host import HostProbe
from system_pulse.sensors.memory import MemoryProbe
from system_pulse.sensors.network import NetworkProbe
from system_pulse.sensors.probe import Probe
from system_pulse.sensors.types import (
    CacheEntry,
    FailureKind,
    ProbeError,
    ProbeFailure,
    ProbeResult,
    ProbeSuccess,
)

__all__ = [
    "Probe",
    "HostProbe",
    "MemoryProbe",
    "CpuProbe",
    "CpuDeltaTracker",
    "DiskProbe",
    "NetworkProbe",
    "AndroidProbe",
    "CacheEntry",
    "FailureKind",
    "ProbeError",
    "ProbeFailure",
    "ProbeResult",
    "ProbeSuccess",
]
