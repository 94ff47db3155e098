"""Telemetry module: structured logging, event names and collection timing."""

from system_pulse.telemetry.collection_timer import CollectionTimer, TimingSpan
from system_pulse.telemetry.events import (
    ANDROID_SUBPROBE_FAILED,
    AUTH_REJECTED,
    COMMAND_FAILED,
    CPU_TRACKER_SEEDED,
    DF_ROW_SKIPPED,
    DEVICE_PROP_FAILED,
    METRICS_COLLECTED,
    METRICS_COLLECTION_FAILED,
    PROBE_CACHE_HIT,
    PROBE_CACHE_MISS,
    PROBE_FAILED,
    PROBE_STALE_WRITE_SKIPPED,
    PROBE_STRATEGY_REJECTED,
    PROBE_STRATEGY_SELECTED,
    SERVICE_READY,
    SERVICE_STARTING,
    SERVICE_STOPPED,
    THERMAL_ZONE_SKIPPED,
)
from system_pulse.telemetry.logger import configure_logging, get_logger

__all__ = [
    "CollectionTimer",
    "TimingSpan",
    "configure_logging",
    "get_logger",
    # Event constants
    "PROBE_CACHE_HIT",
    "PROBE_CACHE_MISS",
    "PROBE_FAILED",
    "PROBE_STALE_WRITE_SKIPPED",
    "PROBE_STRATEGY_SELECTED",
    "PROBE_STRATEGY_REJECTED",
    "COMMAND_FAILED",
    "CPU_TRACKER_SEEDED",
    "DF_ROW_SKIPPED",
    "ANDROID_SUBPROBE_FAILED",
    "THERMAL_ZONE_SKIPPED",
    "DEVICE_PROP_FAILED",
    "METRICS_COLLECTED",
    "METRICS_COLLECTION_FAILED",
    "SERVICE_STARTING",
    "SERVICE_READY",
    "SERVICE_STOPPED",
    "AUTH_REJECTED",
]
