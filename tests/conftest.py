"""Shared fixtures for System Pulse tests."""

from typing import Any, Callable

import pytest

from system_pulse.config import reset_settings
from system_pulse.sensors.probe import Probe


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProbe(Probe[Any]):
    """Probe whose raw read is a plain callable; counts reads."""

    def __init__(
        self,
        name: str,
        reader: Callable[[], Any],
        ttl_seconds: float = 5.0,
        timeout_seconds: float = 5.0,
        clock: FakeClock | None = None,
    ) -> None:
        super().__init__(
            ttl_seconds=ttl_seconds, timeout_seconds=timeout_seconds, clock=clock or FakeClock()
        )
        self.name = name
        self.reader = reader
        self.calls = 0

    def read(self) -> Any:
        self.calls += 1
        return self.reader()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def fresh_settings():
    """Each test sees a freshly loaded settings singleton."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def stub_probe() -> type[StubProbe]:
    """The StubProbe class, for building probes around plain callables."""
    return StubProbe
