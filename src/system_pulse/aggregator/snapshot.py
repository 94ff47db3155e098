"""Immutable snapshot record and its JSON shape."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from system_pulse.sensors.models import (
    AndroidStatus,
    CpuInfo,
    DiskVolume,
    HostInfo,
    InterfaceStats,
    MemoryInfo,
    ServerInfo,
)
from system_pulse.sensors.types import ProbeResult, result_to_payload, to_jsonable

STATUS_OK = "ok"
STATUS_PARTIAL = "partial"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


@dataclass(frozen=True)
class Snapshot:
    """One point-in-time view of the host.

    Every domain slot holds a ProbeResult; ``warnings`` has one
    ``"<domain>: <kind>"`` entry per failed slot, in domain order.
    """

    timestamp: datetime
    collection_time_ms: int
    host: ProbeResult[HostInfo]
    memory: ProbeResult[MemoryInfo]
    cpu: ProbeResult[CpuInfo]
    disk: ProbeResult[list[DiskVolume]]
    network: ProbeResult[dict[str, InterfaceStats]]
    android: ProbeResult[AndroidStatus]
    server: ServerInfo
    warnings: tuple[str, ...] = ()

    @property
    def status(self) -> str:
        return STATUS_OK if not self.warnings else STATUS_PARTIAL

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the dashboard JSON shape (``warnings`` omitted when empty)."""
        meta: dict[str, Any] = {"server": to_jsonable(self.server)}
        if self.warnings:
            meta["warnings"] = list(self.warnings)
        meta["status"] = self.status

        return {
            "timestamp": format_timestamp(self.timestamp),
            "collectionTimeMs": self.collection_time_ms,
            "host": result_to_payload(self.host),
            "memory": result_to_payload(self.memory),
            "cpu": result_to_payload(self.cpu),
            "disk": result_to_payload(self.disk),
            "network": result_to_payload(self.network),
            "android": result_to_payload(self.android),
            "meta": meta,
        }
