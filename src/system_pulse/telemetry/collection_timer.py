"""Per-collection timing instrumentation.

CollectionTimer records one span per probe while the aggregator fans out, so
a slow probe shows up in the ``metrics_collected`` log event.

Usage:
    timer = CollectionTimer()

    async with timer.span("disk"):
        result = await disk_probe.fetch()

    breakdown = timer.to_breakdown()
"""

import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator


@dataclass(frozen=True)
class TimingSpan:
    """A single timed phase within one collection cycle.

    Attributes:
        name: Phase name (probe domain, e.g. "disk").
        offset_ms: Milliseconds from collection start when this span began.
        duration_ms: How long this span took in milliseconds.
        metadata: Extra key-value pairs (cache hit, failure kind, ...).
    """

    name: str
    offset_ms: float
    duration_ms: float
    metadata: dict[str, Any] = field(default_factory=dict)


class CollectionTimer:
    """Records timing spans for one aggregation cycle.

    Uses the monotonic clock. Spans may overlap since probes run concurrently.

    Args:
        collection_id: Identifier for this cycle; generated when omitted.
    """

    def __init__(self, collection_id: str | None = None) -> None:  # noqa: D107
        self.collection_id = collection_id or str(uuid.uuid4())
        self._start_ns: int = time.monotonic_ns()
        self._spans: list[TimingSpan] = []

    def _ms_since(self, ref_ns: int) -> float:
        return round((time.monotonic_ns() - ref_ns) / 1_000_000, 2)

    @asynccontextmanager
    async def span(self, name: str, **metadata: Any) -> AsyncGenerator[dict[str, Any], None]:
        """Time an awaited block as a named span.

        Yields:
            Mutable metadata dict; keys added inside the block are recorded
            with the span.
        """
        start_ns = time.monotonic_ns()
        extra: dict[str, Any] = dict(metadata)
        try:
            yield extra
        finally:
            self._spans.append(
                TimingSpan(
                    name=name,
                    offset_ms=round((start_ns - self._start_ns) / 1_000_000, 2),
                    duration_ms=self._ms_since(start_ns),
                    metadata=extra,
                )
            )

    def get_total_ms(self) -> float:
        """Total milliseconds elapsed since the timer was created."""
        return self._ms_since(self._start_ns)

    def to_breakdown(self) -> list[dict[str, Any]]:
        """Export spans sorted by start offset, followed by a "total" entry."""
        result: list[dict[str, Any]] = []
        for span in sorted(self._spans, key=lambda s: s.offset_ms):
            entry: dict[str, Any] = {
                "phase": span.name,
                "offset_ms": span.offset_ms,
                "duration_ms": span.duration_ms,
            }
            if span.metadata:
                entry["metadata"] = span.metadata
            result.append(entry)

        result.append({"phase": "total", "offset_ms": 0.0, "duration_ms": self.get_total_ms()})
        return result

    def __repr__(self) -> str:  # noqa: D105
        return (
            f"CollectionTimer(collection_id={self.collection_id!r}, "
            f"spans={len(self._spans)}, total_ms={self.get_total_ms()})"
        )
