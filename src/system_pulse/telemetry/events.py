"""Semantic event constants for structured logging.

All log events use these constants rather than magic strings so they can be
queried reliably.
"""

# Probe events
PROBE_CACHE_HIT = "probe_cache_hit"
PROBE_CACHE_MISS = "probe_cache_miss"
PROBE_FAILED = "probe_failed"
PROBE_STALE_WRITE_SKIPPED = "probe_stale_write_skipped"
PROBE_STRATEGY_SELECTED = "probe_strategy_selected"
PROBE_STRATEGY_REJECTED = "probe_strategy_rejected"
DF_ROW_SKIPPED = "df_row_skipped"

# Raw source events
COMMAND_FAILED = "command_failed"

# CPU tracker events
CPU_TRACKER_SEEDED = "cpu_tracker_seeded"

# Android sub-probe events
ANDROID_SUBPROBE_FAILED = "android_subprobe_failed"
THERMAL_ZONE_SKIPPED = "thermal_zone_skipped"
DEVICE_PROP_FAILED = "device_prop_failed"

# Aggregator events
METRICS_COLLECTED = "metrics_collected"
METRICS_COLLECTION_FAILED = "metrics_collection_failed"

# Service events
SERVICE_STARTING = "service_starting"
SERVICE_READY = "service_ready"
SERVICE_STOPPED = "service_stopped"
AUTH_REJECTED = "auth_rejected"
