"""Tests for the Aggregator fan-out and Snapshot assembly.

Tests cover:
- All-ok snapshots and their JSON shape
- One failing domain -> partial status with a single warning
- Every domain failing -> partial status with six ordered warnings
- Exceptions escaping a probe become internal-error failures
- Server metadata failures propagate
"""

from datetime import datetime, timezone
from typing import Any
from unittest.mock import patch

import pytest

from system_pulse.aggregator import DOMAINS, Aggregator, Snapshot
from system_pulse.aggregator.snapshot import format_timestamp
from system_pulse.config import AppConfig
from system_pulse.sensors.types import (
    FailureKind,
    ProbeFailure,
    ProbeSuccess,
    SourceUnavailableError,
)

PAYLOADS: dict[str, Any] = {
    "host": {"hostname": "pixel"},
    "memory": {"total": 100},
    "cpu": {"usage": 12.5},
    "disk": [],
    "network": {},
    "android": {"available": False, "reason": "Android features not available on Darwin"},
}


def _failing() -> Any:
    raise SourceUnavailableError("source missing")


def _probes(stub_probe: Any, failing: tuple[str, ...] = ()) -> dict[str, Any]:
    return {
        domain: stub_probe(
            domain,
            _failing if domain in failing else (lambda value=PAYLOADS[domain]: value),
        )
        for domain in DOMAINS
    }


class TestAggregatorCollect:
    """Tests for Aggregator.collect()."""

    @pytest.mark.asyncio
    async def test_all_ok(self, stub_probe: Any) -> None:
        snapshot = await Aggregator(_probes(stub_probe)).collect()

        assert snapshot.status == "ok"
        assert snapshot.warnings == ()
        assert all(
            isinstance(getattr(snapshot, domain), ProbeSuccess) for domain in DOMAINS
        )
        assert snapshot.collection_time_ms >= 0

        data = snapshot.to_dict()
        assert "warnings" not in data["meta"]
        assert data["meta"]["status"] == "ok"
        assert data["host"] == {"hostname": "pixel"}
        assert data["disk"] == []

    @pytest.mark.asyncio
    async def test_one_failing_domain_is_partial(self, stub_probe: Any) -> None:
        snapshot = await Aggregator(_probes(stub_probe, failing=("network",))).collect()

        assert snapshot.status == "partial"
        assert snapshot.warnings == ("network: source-unavailable",)
        assert isinstance(snapshot.network, ProbeFailure)
        for domain in DOMAINS:
            if domain != "network":
                assert isinstance(getattr(snapshot, domain), ProbeSuccess)

        data = snapshot.to_dict()
        assert data["network"] == {"error": "source-unavailable", "message": "source missing"}
        assert data["meta"]["warnings"] == ["network: source-unavailable"]
        assert data["meta"]["status"] == "partial"
        assert data["cpu"] == {"usage": 12.5}

    @pytest.mark.asyncio
    async def test_all_domains_failing(self, stub_probe: Any) -> None:
        snapshot = await Aggregator(_probes(stub_probe, failing=DOMAINS)).collect()

        assert snapshot.status == "partial"
        assert snapshot.warnings == tuple(f"{d}: source-unavailable" for d in DOMAINS)

        data = snapshot.to_dict()
        for domain in DOMAINS:
            assert data[domain]["error"] == "source-unavailable"
        assert data["meta"]["server"]["pid"] > 0

    @pytest.mark.asyncio
    async def test_exception_escaping_probe_is_internal_error(self, stub_probe: Any) -> None:
        probes = _probes(stub_probe)

        async def broken_fetch() -> Any:
            raise RuntimeError("probe exploded")

        probes["disk"].fetch = broken_fetch

        snapshot = await Aggregator(probes).collect()

        assert isinstance(snapshot.disk, ProbeFailure)
        assert snapshot.disk.kind == FailureKind.INTERNAL_ERROR
        assert snapshot.disk.message == "probe exploded"
        assert snapshot.warnings == ("disk: internal-error",)

    @pytest.mark.asyncio
    async def test_server_metadata_failure_propagates(self, stub_probe: Any) -> None:
        with patch(
            "system_pulse.sensors.platforms.base.process_info",
            side_effect=RuntimeError("no process table"),
        ):
            with pytest.raises(RuntimeError, match="no process table"):
                await Aggregator(_probes(stub_probe)).collect()

    @pytest.mark.asyncio
    async def test_probes_are_reused_across_collections(self, stub_probe: Any) -> None:
        probes = _probes(stub_probe)
        aggregator = Aggregator(probes)

        await aggregator.collect()
        await aggregator.collect()

        # StubProbe clocks never advance, so the second collection is all cache hits.
        assert all(probe.calls == 1 for probe in probes.values())


class TestAggregatorConstruction:
    def test_missing_domain_rejected(self, stub_probe: Any) -> None:
        probes = _probes(stub_probe)
        del probes["android"]

        with pytest.raises(ValueError, match="android"):
            Aggregator(probes)

    def test_from_settings_applies_ttls(self) -> None:
        settings = AppConfig(disk_ttl_seconds=60.0, network_ttl_seconds=1.0)

        aggregator = Aggregator.from_settings(settings)

        assert list(aggregator.probes) == list(DOMAINS)
        assert aggregator.probes["disk"].ttl_seconds == 60.0
        assert aggregator.probes["network"].ttl_seconds == 1.0
        assert aggregator.probes["memory"].ttl_seconds == 1.0
        assert aggregator.probes["host"].ttl_seconds == 5.0


class TestSnapshotSerialization:
    def test_timestamp_is_utc_with_z(self) -> None:
        moment = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024-05-01T12:30:45.123Z"

    @pytest.mark.asyncio
    async def test_top_level_keys(self, stub_probe: Any) -> None:
        snapshot: Snapshot = await Aggregator(_probes(stub_probe)).collect()
        data = snapshot.to_dict()

        assert list(data) == [
            "timestamp",
            "collectionTimeMs",
            "host",
            "memory",
            "cpu",
            "disk",
            "network",
            "android",
            "meta",
        ]
        assert set(data["meta"]["server"]) == {
            "platform",
            "pythonVersion",
            "uptime",
            "memoryUsage",
            "pid",
        }
        assert set(data["meta"]["server"]["memoryUsage"]) == {"rss", "vms"}
        assert data["timestamp"].endswith("Z")
