"""In-memory analytics counters.

``track`` is the only writer and takes the lock exclusively; ``get_stats``
reads under the shared lock. Nothing is persisted: counters start at zero
with ``last_update`` set to process start and live as long as the process.

``uptime_seconds`` in the snapshot is the time since the *last update*, not
since process start. Dashboards built on this service depend on that.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from opentelemetry.trace import Tracer

from jokemesh.core.clock import utcnow
from jokemesh.core.logging import get_logger
from jokemesh.observability.metrics import AnalyticsInstruments
from jokemesh.services.locks import ReadWriteLock


logger = get_logger(__name__)


@dataclass
class Stats:
    """Aggregate counters. ``total_jokes`` always equals ``requests``."""

    requests: int = 0
    total_jokes: int = 0
    last_update: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class StatsSnapshot:
    total_requests: int
    total_jokes: int
    last_update: datetime
    uptime_seconds: float


class AnalyticsTracker:
    """Owns the Stats aggregate and its lock."""

    def __init__(
        self,
        tracer: Tracer,
        instruments: AnalyticsInstruments,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._tracer = tracer
        self._instruments = instruments
        self._clock = clock
        self._stats = Stats(last_update=clock())
        self._lock = ReadWriteLock()

    async def track(self) -> Stats:
        """Count one served joke. Returns a copy of the updated counters."""
        with self._tracer.start_as_current_span("trackEvent") as span:
            async with self._lock.write():
                self._stats.requests += 1
                self._stats.total_jokes += 1
                self._stats.last_update = self._clock()
                updated = Stats(
                    requests=self._stats.requests,
                    total_jokes=self._stats.total_jokes,
                    last_update=self._stats.last_update,
                )

            self._instruments.tracking_count.add(1)

            span.set_attribute("stats.requests", updated.requests)
            span.set_attribute("stats.total_jokes", updated.total_jokes)

            logger.info(
                "Event tracked",
                total_requests=updated.requests,
                total_jokes=updated.total_jokes,
            )
            return updated

    async def get_stats(self) -> StatsSnapshot:
        with self._tracer.start_as_current_span("getStats") as span:
            async with self._lock.read():
                snapshot = StatsSnapshot(
                    total_requests=self._stats.requests,
                    total_jokes=self._stats.total_jokes,
                    last_update=self._stats.last_update,
                    uptime_seconds=(self._clock() - self._stats.last_update).total_seconds(),
                )

            span.set_attribute("stats.requests", snapshot.total_requests)
            span.set_attribute("stats.total_jokes", snapshot.total_jokes)

            logger.info("Stats retrieved", total_requests=snapshot.total_requests)
            return snapshot
