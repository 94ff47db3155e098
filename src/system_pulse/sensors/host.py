"""Host identity probe."""

import time

from system_pulse.sensors.models import HostInfo
from system_pulse.sensors.platforms import base
from system_pulse.sensors.probe import Clock, Probe


class HostProbe(Probe[HostInfo]):
    """Hostname, OS, architecture, uptime and interpreter version."""

    name = "host"

    def __init__(
        self,
        ttl_seconds: float = 5.0,
        timeout_seconds: float = 2.0,
        clock: Clock = time.monotonic,
    ) -> None:  # noqa: D107
        super().__init__(ttl_seconds=ttl_seconds, timeout_seconds=timeout_seconds, clock=clock)

    def read(self) -> HostInfo:
        return HostInfo.model_validate(base.host_identity())
