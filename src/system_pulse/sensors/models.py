"""Typed probe payloads.

Field names are snake_case in Python and serialize to the camelCase keys the
dashboard reads (``model_dump(by_alias=True)``).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializationInfo, model_serializer
from pydantic.alias_generators import to_camel


class Payload(BaseModel):
    """Base for all probe payloads: immutable, camelCase on the wire."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Host / memory
# ============================================================================


class HostInfo(Payload):
    """Static-ish host identity."""

    hostname: str
    platform: str
    arch: str
    release: str
    os_type: str = Field(alias="type")
    uptime: int
    python_version: str
    cpu_count: int


class MemoryInfo(Payload):
    """System memory in bytes plus pre-rounded MB/GB figures."""

    total: int
    used: int
    free: int
    usage: float
    total_mb: float = Field(alias="totalMB")
    used_mb: float = Field(alias="usedMB")
    free_mb: float = Field(alias="freeMB")
    total_gb: float = Field(alias="totalGB")
    used_gb: float = Field(alias="usedGB")
    free_gb: float = Field(alias="freeGB")


# ============================================================================
# CPU
# ============================================================================


class CoreUsage(Payload):
    core: int
    usage: float


class CpuInfo(Payload):
    """CPU usage snapshot.

    ``estimated`` is true when ``usage`` is the load-average approximation
    rather than a measured tick delta.
    """

    usage: float
    loadavg: list[float]
    cores: int
    model: str
    speed: int
    core_usage: list[CoreUsage]
    estimated: bool


# ============================================================================
# Disk / network
# ============================================================================


class DiskVolume(Payload):
    """One mounted volume."""

    filesystem: str
    size: str
    used: str
    available: str
    usage: str
    usage_percent: int
    mountpoint: str
    size_bytes: int
    used_bytes: int
    available_bytes: int


class TrafficCounters(Payload):
    bytes: int
    bytes_formatted: str
    packets: int
    errors: int
    dropped: int


class TrafficTotals(Payload):
    bytes: int
    bytes_formatted: str
    packets: int


class InterfaceStats(Payload):
    """Cumulative counters for one network interface."""

    rx: TrafficCounters
    tx: TrafficCounters
    total: TrafficTotals


# ============================================================================
# Android
# ============================================================================


class BatteryInfo(Payload):
    """termux-battery-status output, normalized."""

    level: int | float | None = None
    status: str | None = None
    health: str | None = None
    plugged: str | None = None
    temperature: float | None = None
    voltage: float | None = None
    current: float = 0
    temperature_celsius: float | None = None
    voltage_volts: float | None = None

    @model_serializer(mode="wrap")
    def _keep_derived_readings(self, handler: Any, info: SerializationInfo) -> dict[str, Any]:
        # Derived readings are always reported, null when the source lacks them.
        data = handler(self)
        for name in ("temperature_celsius", "voltage_volts"):
            key = to_camel(name) if info.by_alias else name
            data.setdefault(key, getattr(self, name))
        return data


class ThermalZone(Payload):
    zone: str
    temperature: int
    temperature_celsius: float
    temperature_fahrenheit: float


class ThermalInfo(Payload):
    zones: dict[str, ThermalZone]
    count: int


class DeviceInfo(Payload):
    android_version: str | None = None
    model: str | None = None
    brand: str | None = None
    kernel_version: str | None = None


class AndroidStatus(Payload):
    """Android-specific status.

    ``available=False`` with a reason is the normal answer on non-Android
    hosts. When available, each sub-section holds either its payload or an
    ``{error, message}`` dict.
    """

    available: bool
    reason: str | None = None
    termux_api: bool | None = None
    battery: dict[str, Any] | None = None
    thermal: dict[str, Any] | None = None
    device: dict[str, Any] | None = None
    timestamp: datetime | None = None


# ============================================================================
# Server metadata
# ============================================================================


class ProcessMemory(Payload):
    rss: int
    vms: int


class ServerInfo(Payload):
    """Metadata about the process serving the snapshot."""

    platform: str
    python_version: str
    uptime: float
    memory_usage: ProcessMemory
    pid: int
