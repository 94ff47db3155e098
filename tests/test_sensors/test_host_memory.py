"""Tests for the host and memory probes."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import patch

import pytest

from system_pulse.sensors.host import HostProbe
from system_pulse.sensors.memory import MemoryProbe
from system_pulse.sensors.types import FailureKind, ProbeFailure, ProbeSuccess

GIB = 1024**3

HOST_FACTS = {
    "hostname": "pixel",
    "platform": "linux",
    "arch": "aarch64",
    "release": "4.19.157-perf+",
    "type": "Linux",
    "uptime": 3600,
    "python_version": "3.12.1",
    "cpu_count": 8,
}


@pytest.mark.asyncio
async def test_host_payload_keys(fake_clock: Any) -> None:
    with patch("system_pulse.sensors.platforms.base.host_identity", return_value=HOST_FACTS):
        result = await HostProbe(clock=fake_clock).fetch()

    assert isinstance(result, ProbeSuccess)
    assert result.value.model_dump(by_alias=True) == {
        "hostname": "pixel",
        "platform": "linux",
        "arch": "aarch64",
        "release": "4.19.157-perf+",
        "type": "Linux",
        "uptime": 3600,
        "pythonVersion": "3.12.1",
        "cpuCount": 8,
    }


@pytest.mark.asyncio
async def test_memory_used_is_total_minus_available(fake_clock: Any) -> None:
    vm = SimpleNamespace(total=8 * GIB, available=2 * GIB)
    with patch("system_pulse.sensors.platforms.base.virtual_memory", return_value=vm):
        result = await MemoryProbe(clock=fake_clock).fetch()

    assert isinstance(result, ProbeSuccess)
    info = result.value
    assert info.used == 6 * GIB
    assert info.free == 2 * GIB
    assert info.usage == 75.0
    assert info.total_gb == 8.0
    assert info.used_mb == 6144.0

    payload = info.model_dump(by_alias=True)
    assert payload["totalMB"] == 8192.0
    assert payload["freeGB"] == 2.0


@pytest.mark.asyncio
async def test_memory_read_error_is_failure(fake_clock: Any) -> None:
    with patch(
        "system_pulse.sensors.platforms.base.virtual_memory",
        side_effect=PermissionError("/proc/meminfo"),
    ):
        result = await MemoryProbe(clock=fake_clock).fetch()

    assert isinstance(result, ProbeFailure)
    assert result.kind == FailureKind.SOURCE_UNAVAILABLE


def test_memory_ttl_default() -> None:
    assert MemoryProbe().ttl_seconds == 1.0
    assert HostProbe().ttl_seconds == 5.0
