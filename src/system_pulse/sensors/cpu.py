"""CPU usage probe.

Overall usage is a rate, so it needs two cumulative tick readings:
CpuDeltaTracker keeps the previous sample and turns the next one into a
percentage. With no previous sample the probe reports
``min(100, loadavg_1min * 10)`` instead and flags it ``estimated``. That
figure is a rough heuristic kept for dashboard compatibility, not a
measurement.

Counter sources are picked once at construction:
- `ProcStatCpuSource`: /proc/stat (Linux, Android)
- `PsutilCpuSource`: psutil cpu_times (everything else)
- `LoadAverageCpuSource`: neither is readable; usage is always estimated
"""

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from system_pulse.sensors.models import CoreUsage, CpuInfo
from system_pulse.sensors.platforms import base, procfs
from system_pulse.sensors.probe import Clock, Probe
from system_pulse.sensors.types import SourceParseError
from system_pulse.telemetry import (
    CPU_TRACKER_SEEDED,
    PROBE_STRATEGY_REJECTED,
    PROBE_STRATEGY_SELECTED,
    get_logger,
)

log = get_logger(__name__)

# user, nice, system, idle, iowait, irq, softirq
_TICK_FIELDS = 7


@dataclass(frozen=True)
class CpuTicks:
    """Cumulative ticks for one CPU line (aggregate or one core)."""

    idle: int
    iowait: int
    total: int

    def usage_since_boot(self) -> float:
        """Busy share of all ticks since boot, I/O wait counted as idle."""
        if self.total <= 0:
            return 0.0
        busy = self.total - self.idle - self.iowait
        return max(0.0, min(100.0, busy / self.total * 100))


@dataclass(frozen=True)
class CpuTicksReading:
    """One raw read: aggregate ticks (None if the source has none) plus per-core ticks."""

    aggregate: CpuTicks | None
    cores: list[CpuTicks]


@dataclass(frozen=True)
class CpuCounterSample:
    """Aggregate counters as stored by the delta tracker."""

    idle_ticks: int
    iowait_ticks: int
    total_ticks: int
    captured_at: float


@dataclass(frozen=True)
class CpuUsageReading:
    usage: float
    estimated: bool


def parse_proc_stat(text: str) -> CpuTicksReading:
    """Parse the ``cpu`` and ``cpuN`` lines of /proc/stat.

    Raises:
        SourceParseError: If the aggregate ``cpu`` line is missing or malformed.
    """
    aggregate: CpuTicks | None = None
    cores: list[CpuTicks] = []

    for line in text.splitlines():
        if not line.startswith("cpu"):
            continue
        parts = line.split()
        label = parts[0]
        try:
            values = [int(v) for v in parts[1 : 1 + _TICK_FIELDS]]
        except ValueError:
            raise SourceParseError(
                f"Non-numeric tick counter in /proc/stat line: {label}"
            ) from None
        if len(values) < 4:
            raise SourceParseError(f"Too few tick counters in /proc/stat line: {label}")

        ticks = CpuTicks(
            idle=values[3],
            iowait=values[4] if len(values) > 4 else 0,
            total=sum(values),
        )
        if label == "cpu":
            aggregate = ticks
        elif label[3:].isdigit():
            cores.append(ticks)

    if aggregate is None:
        raise SourceParseError("No aggregate 'cpu' line in /proc/stat")
    return CpuTicksReading(aggregate=aggregate, cores=cores)


class CpuCounterSource(Protocol):
    def read(self) -> CpuTicksReading: ...


class ProcStatCpuSource:
    """Tick counters from /proc/stat."""

    def __init__(self, path: Path = procfs.PROC_STAT) -> None:  # noqa: D107
        self.path = path

    def read(self) -> CpuTicksReading:
        return parse_proc_stat(procfs.read_text(self.path))


def _ticks_from_times(times: object) -> CpuTicks:
    # psutil reports seconds; centiseconds keep integer tick semantics.
    fields = ("user", "nice", "system", "idle", "iowait", "irq", "softirq")
    values = [getattr(times, f, 0.0) or 0.0 for f in fields]
    as_ticks = [int(round(v * 100)) for v in values]
    return CpuTicks(idle=as_ticks[3], iowait=as_ticks[4], total=sum(as_ticks))


class PsutilCpuSource:
    """Tick counters from psutil.cpu_times()."""

    def read(self) -> CpuTicksReading:
        aggregate = _ticks_from_times(base.cpu_times())
        cores = [_ticks_from_times(t) for t in base.cpu_times(percpu=True)]
        return CpuTicksReading(aggregate=aggregate, cores=cores)


class LoadAverageCpuSource:
    """No readable tick counters; every reading reports the load-average estimate."""

    def read(self) -> CpuTicksReading:
        return CpuTicksReading(aggregate=None, cores=[])


def _can_read(source: CpuCounterSource) -> bool:
    try:
        source.read()
    except Exception as e:
        log.debug(
            PROBE_STRATEGY_REJECTED,
            probe="cpu",
            source=type(source).__name__,
            error=str(e),
            error_type=type(e).__name__,
        )
        return False
    return True


def select_cpu_source() -> CpuCounterSource:
    """Pick the first counter source this host lets us read.

    /proc/stat can exist yet be unreadable (Android 8+ denies it to apps,
    and psutil reads the same file), so each candidate gets a trial read.
    With no readable counters, usage falls back to the load-average estimate.
    """
    candidates: list[CpuCounterSource] = []
    if procfs.is_available(procfs.PROC_STAT):
        candidates.append(ProcStatCpuSource())
    candidates.append(PsutilCpuSource())

    source = next((c for c in candidates if _can_read(c)), LoadAverageCpuSource())
    log.debug(PROBE_STRATEGY_SELECTED, probe="cpu", source=type(source).__name__)
    return source


def load_average_estimate(load_1min: float) -> float:
    """Coarse usage approximation from the 1-minute load average."""
    return min(100.0, load_1min * 10)


class CpuDeltaTracker:
    """Turns successive cumulative samples into a usage percentage.

    States: uninitialized (no stored sample) and seeded. Every observed
    sample replaces the stored one. Callers skip ``observe`` when a read
    fails, which leaves the stored sample in place.
    """

    def __init__(self) -> None:  # noqa: D107
        self._last: CpuCounterSample | None = None

    @property
    def seeded(self) -> bool:
        return self._last is not None

    def observe(self, sample: CpuCounterSample, fallback: float) -> CpuUsageReading:
        """Compute usage against the stored sample, then store this one.

        Args:
            sample: New cumulative reading.
            fallback: Value returned when no previous sample exists.

        Returns:
            Measured usage, or the fallback flagged as estimated.
        """
        previous = self._last
        self._last = sample

        if previous is None:
            log.debug(CPU_TRACKER_SEEDED, total_ticks=sample.total_ticks)
            return CpuUsageReading(usage=fallback, estimated=True)

        total_delta = sample.total_ticks - previous.total_ticks
        idle_delta = (sample.idle_ticks + sample.iowait_ticks) - (
            previous.idle_ticks + previous.iowait_ticks
        )
        if total_delta <= 0:
            return CpuUsageReading(usage=0.0, estimated=False)

        usage = 100 * (1 - idle_delta / total_delta)
        return CpuUsageReading(usage=max(0.0, min(100.0, usage)), estimated=False)


class CpuProbe(Probe[CpuInfo]):
    """Overall and per-core CPU usage, load averages and model info."""

    name = "cpu"

    def __init__(
        self,
        ttl_seconds: float = 5.0,
        timeout_seconds: float = 2.0,
        source: CpuCounterSource | None = None,
        clock: Clock = time.monotonic,
    ) -> None:  # noqa: D107
        super().__init__(ttl_seconds=ttl_seconds, timeout_seconds=timeout_seconds, clock=clock)
        self.source = source if source is not None else select_cpu_source()
        self.tracker = CpuDeltaTracker()
        # Serializes read+observe so samples reach the tracker in capture order.
        self._sample_lock = threading.Lock()
        self._model: str | None = None

    def read(self) -> CpuInfo:
        loadavg = base.load_average()
        fallback = load_average_estimate(loadavg[0])

        with self._sample_lock:
            reading = self.source.read()
            if reading.aggregate is None:
                usage = CpuUsageReading(usage=fallback, estimated=True)
            else:
                sample = CpuCounterSample(
                    idle_ticks=reading.aggregate.idle,
                    iowait_ticks=reading.aggregate.iowait,
                    total_ticks=reading.aggregate.total,
                    captured_at=self._clock(),
                )
                usage = self.tracker.observe(sample, fallback)

        core_usage = [
            CoreUsage(core=index, usage=round(ticks.usage_since_boot(), 2))
            for index, ticks in enumerate(reading.cores)
        ]

        overall = usage.usage
        if overall == 0 and core_usage:
            overall = sum(c.usage for c in core_usage) / len(core_usage)

        return CpuInfo(
            usage=round(overall, 2),
            loadavg=[round(v, 3) for v in loadavg],
            cores=base.cpu_count() or len(core_usage),
            model=self._cpu_model(),
            speed=base.cpu_speed_mhz(),
            core_usage=core_usage,
            estimated=usage.estimated,
        )

    def _cpu_model(self) -> str:
        if self._model is None:
            self._model = procfs.read_cpu_model() or base.cpu_model() or "Unknown"
        return self._model
