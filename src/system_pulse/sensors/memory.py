"""Memory probe (psutil virtual_memory)."""

import time

from system_pulse.sensors.models import MemoryInfo
from system_pulse.sensors.platforms import base
from system_pulse.sensors.probe import Clock, Probe

_MB = 1024 * 1024
_GB = 1024 * 1024 * 1024


class MemoryProbe(Probe[MemoryInfo]):
    """Total/used/free system memory.

    "free" is the memory available to new processes (psutil ``available``),
    so ``used = total - free``.
    """

    name = "memory"

    def __init__(
        self,
        ttl_seconds: float = 1.0,
        timeout_seconds: float = 2.0,
        clock: Clock = time.monotonic,
    ) -> None:  # noqa: D107
        super().__init__(ttl_seconds=ttl_seconds, timeout_seconds=timeout_seconds, clock=clock)

    def read(self) -> MemoryInfo:
        vm = base.virtual_memory()
        total = int(vm.total)
        free = int(vm.available)
        used = total - free

        return MemoryInfo(
            total=total,
            used=used,
            free=free,
            usage=round(used / total * 100, 2) if total > 0 else 0.0,
            total_mb=round(total / _MB, 2),
            used_mb=round(used / _MB, 2),
            free_mb=round(free / _MB, 2),
            total_gb=round(total / _GB, 2),
            used_gb=round(used / _GB, 2),
            free_gb=round(free / _GB, 2),
        )
