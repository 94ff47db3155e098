"""Concurrent fan-out over all probes into one Snapshot.

Probes never raise for source problems, so a slow or broken domain only
costs its own slot: the other five are reported normally and the snapshot
is marked partial.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Mapping

from system_pulse.aggregator.snapshot import Snapshot
from system_pulse.config import AppConfig, get_settings
from system_pulse.sensors.android import AndroidProbe
from system_pulse.sensors.cpu import CpuProbe
from system_pulse.sensors.disk import DiskProbe
from system_pulse.sensors.host import HostProbe
from system_pulse.sensors.memory import MemoryProbe
from system_pulse.sensors.models import ServerInfo
from system_pulse.sensors.network import NetworkProbe
from system_pulse.sensors.platforms import base
from system_pulse.sensors.probe import Probe
from system_pulse.sensors.types import FailureKind, ProbeFailure, ProbeResult, describe_exception
from system_pulse.telemetry import METRICS_COLLECTED, PROBE_FAILED, CollectionTimer, get_logger

log = get_logger(__name__)

# Snapshot slot order; warnings follow it too.
DOMAINS = ("host", "memory", "cpu", "disk", "network", "android")


class Aggregator:
    """Runs every probe concurrently and assembles the Snapshot.

    Probes are held for the aggregator's lifetime so their caches and the CPU
    delta tracker survive between collections.

    Args:
        probes: One probe per domain in DOMAINS.

    Raises:
        ValueError: If a domain has no probe.
    """

    def __init__(self, probes: Mapping[str, Probe[Any]]) -> None:  # noqa: D107
        missing = [domain for domain in DOMAINS if domain not in probes]
        if missing:
            raise ValueError(f"Missing probes for domains: {', '.join(missing)}")
        self.probes: dict[str, Probe[Any]] = {domain: probes[domain] for domain in DOMAINS}

    @classmethod
    def from_settings(cls, settings: AppConfig | None = None) -> "Aggregator":
        """Build the standard six probes from configuration."""
        settings = settings or get_settings()
        file_timeout = settings.file_read_timeout_seconds
        return cls(
            {
                "host": HostProbe(
                    ttl_seconds=settings.host_ttl_seconds, timeout_seconds=file_timeout
                ),
                "memory": MemoryProbe(
                    ttl_seconds=settings.memory_ttl_seconds, timeout_seconds=file_timeout
                ),
                "cpu": CpuProbe(ttl_seconds=settings.cpu_ttl_seconds, timeout_seconds=file_timeout),
                "disk": DiskProbe(
                    ttl_seconds=settings.disk_ttl_seconds,
                    timeout_seconds=settings.command_timeout_seconds,
                ),
                "network": NetworkProbe(
                    ttl_seconds=settings.network_ttl_seconds, timeout_seconds=file_timeout
                ),
                "android": AndroidProbe(
                    ttl_seconds=settings.android_ttl_seconds,
                    command_timeout_seconds=settings.command_timeout_seconds,
                    getprop_timeout_seconds=settings.getprop_timeout_seconds,
                    file_read_timeout_seconds=file_timeout,
                ),
            }
        )

    async def collect(self) -> Snapshot:
        """Collect one snapshot.

        Returns:
            Snapshot with one result per domain.

        Raises:
            Exception: Only when server metadata cannot be built; probe
                problems are reported inside the snapshot instead.
        """
        timer = CollectionTimer()
        started = time.monotonic()

        outcomes = await asyncio.gather(
            *(self._fetch(timer, domain, probe) for domain, probe in self.probes.items()),
            return_exceptions=True,
        )
        collection_time_ms = int(round((time.monotonic() - started) * 1000))

        results: dict[str, ProbeResult[Any]] = {}
        warnings: list[str] = []
        for domain, outcome in zip(DOMAINS, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                log.error(
                    PROBE_FAILED,
                    probe=domain,
                    kind=FailureKind.INTERNAL_ERROR.value,
                    error=str(outcome),
                    error_type=type(outcome).__name__,
                    exc_info=outcome,
                )
                outcome = ProbeFailure(
                    kind=FailureKind.INTERNAL_ERROR, message=describe_exception(outcome)
                )
            if isinstance(outcome, ProbeFailure):
                warnings.append(f"{domain}: {outcome.kind.value}")
            results[domain] = outcome

        snapshot = Snapshot(
            timestamp=datetime.now(timezone.utc),
            collection_time_ms=collection_time_ms,
            server=ServerInfo.model_validate(base.process_info()),
            warnings=tuple(warnings),
            **results,
        )

        log.info(
            METRICS_COLLECTED,
            collection_id=timer.collection_id,
            status=snapshot.status,
            warnings=list(snapshot.warnings),
            collection_time_ms=collection_time_ms,
            phases=timer.to_breakdown(),
        )
        return snapshot

    async def _fetch(
        self, timer: CollectionTimer, domain: str, probe: Probe[Any]
    ) -> ProbeResult[Any]:
        async with timer.span(domain) as span_meta:
            result = await probe.fetch()
            span_meta["ok"] = result.ok
        return result
