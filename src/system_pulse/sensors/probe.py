"""Generic probe contract with a per-instance TTL cache.

A probe wraps one raw source reader for one metric domain. ``fetch()``:

- serves the cached result while it is younger than the probe's TTL;
- otherwise runs the reader in a worker thread under a timeout, converts
  any error into a ProbeFailure, caches the outcome (failures too) and
  returns it.

Cache writes are ordered by the time the read started, so an older
in-flight read finishing late never overwrites a newer entry. The cache is
owned by the probe instance; nothing is shared across probes.
"""

import asyncio
import threading
import time
from typing import Callable, Generic, TypeVar

from system_pulse.sensors.types import CacheEntry, ProbeFailure, ProbeResult, ProbeSuccess
from system_pulse.telemetry import (
    PROBE_CACHE_HIT,
    PROBE_CACHE_MISS,
    PROBE_FAILED,
    PROBE_STALE_WRITE_SKIPPED,
    get_logger,
)

log = get_logger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


class Probe(Generic[T]):
    """Base class for metric-domain probes.

    Subclasses implement ``read()`` (blocking, runs in a worker thread) or
    override ``_collect()`` when they need their own async fan-out.

    Args:
        ttl_seconds: Maximum age of a cached result that is still served.
        timeout_seconds: Bound on one uncached read.
        clock: Monotonic time source, injectable for tests.
    """

    name = "probe"

    def __init__(
        self,
        ttl_seconds: float,
        timeout_seconds: float,
        clock: Clock = time.monotonic,
    ) -> None:  # noqa: D107
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._cache: CacheEntry[T] | None = None
        self._cache_lock = threading.Lock()

    @property
    def cached(self) -> CacheEntry[T] | None:
        """Current cache entry, fresh or not."""
        with self._cache_lock:
            return self._cache

    async def fetch(self) -> ProbeResult[T]:
        """Return this domain's result, from cache when fresh.

        Never raises for reader or parser errors; they come back as
        ProbeFailure.
        """
        now = self._clock()
        entry = self.cached
        if entry is not None and entry.is_fresh(now, self.ttl_seconds):
            log.debug(
                PROBE_CACHE_HIT,
                probe=self.name,
                age_seconds=round(now - entry.captured_at, 3),
                ttl_seconds=self.ttl_seconds,
            )
            return entry.result

        log.debug(PROBE_CACHE_MISS, probe=self.name, ttl_seconds=self.ttl_seconds)

        captured_at = self._clock()
        result: ProbeResult[T]
        try:
            result = ProbeSuccess(await self._collect())
        except Exception as e:
            result = ProbeFailure.from_exception(e)
            log.warning(
                PROBE_FAILED,
                probe=self.name,
                kind=result.kind.value,
                error=result.message,
                error_type=type(e).__name__,
            )

        self._store(CacheEntry(result=result, captured_at=captured_at))
        return result

    async def _collect(self) -> T:
        """Run ``read()`` off the event loop, bounded by the probe timeout."""
        return await asyncio.wait_for(asyncio.to_thread(self.read), timeout=self.timeout_seconds)

    def read(self) -> T:
        """Read and parse the raw source (blocking)."""
        raise NotImplementedError

    def _store(self, entry: CacheEntry[T]) -> bool:
        """Store entry unless the cache already holds a newer capture.

        Returns:
            True if the entry was written.
        """
        with self._cache_lock:
            current = self._cache
            if current is not None and current.captured_at > entry.captured_at:
                log.debug(
                    PROBE_STALE_WRITE_SKIPPED,
                    probe=self.name,
                    cached_at=current.captured_at,
                    discarded_at=entry.captured_at,
                )
                return False
            self._cache = entry
            return True

    def __repr__(self) -> str:  # noqa: D105
        return f"{type(self).__name__}(ttl_seconds={self.ttl_seconds}, timeout_seconds={self.timeout_seconds})"
