"""Snapshot aggregation over all metric-domain probes."""

from system_pulse.aggregator.aggregator import DOMAINS, Aggregator
from system_pulse.aggregator.snapshot import STATUS_OK, STATUS_PARTIAL, Snapshot

__all__ = ["Aggregator", "DOMAINS", "Snapshot", "STATUS_OK", "STATUS_PARTIAL"]
