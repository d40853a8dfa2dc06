"""Tests for the in-memory analytics tracker."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
from opentelemetry.metrics import Meter
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import Tracer

from jokemesh.observability.metrics import AnalyticsInstruments
from jokemesh.services.analytics import AnalyticsTracker


START = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_tracker(tracer: Tracer, meter: Meter) -> Callable[..., AnalyticsTracker]:
    instruments = AnalyticsInstruments.create(meter)

    def factory(clock: Callable[[], datetime] | None = None) -> AnalyticsTracker:
        if clock is None:
            return AnalyticsTracker(tracer, instruments)
        return AnalyticsTracker(tracer, instruments, clock=clock)

    return factory


class TestInitialState:
    @pytest.mark.asyncio
    async def test_starts_at_zero(self, make_tracker, clock: FakeClock) -> None:
        tracker = make_tracker(clock)
        stats = await tracker.get_stats()
        assert stats.total_requests == 0
        assert stats.total_jokes == 0
        assert stats.last_update == START
        assert stats.uptime_seconds == 0


class TestTrack:
    @pytest.mark.asyncio
    async def test_track_increments_both_counters(self, make_tracker, clock: FakeClock) -> None:
        tracker = make_tracker(clock)
        clock.advance(5)

        updated = await tracker.track()

        assert updated.requests == 1
        assert updated.total_jokes == 1
        assert updated.last_update == START + timedelta(seconds=5)

    @pytest.mark.asyncio
    async def test_concurrent_tracks_are_not_lost(self, make_tracker) -> None:
        """100 concurrent notifications produce a count of exactly 100."""
        tracker = make_tracker()

        await asyncio.gather(*(tracker.track() for _ in range(100)))

        stats = await tracker.get_stats()
        assert stats.total_requests == 100
        assert stats.total_jokes == 100

    @pytest.mark.asyncio
    async def test_track_records_counter(
        self,
        make_tracker,
        metric_reader: InMemoryMetricReader,
        metric_points,
    ) -> None:
        tracker = make_tracker()
        await tracker.track()
        await tracker.track()

        (point,) = metric_points(metric_reader, "analytics.tracks")
        assert point.value == 2

    @pytest.mark.asyncio
    async def test_track_records_span(
        self, make_tracker, span_exporter: InMemorySpanExporter
    ) -> None:
        tracker = make_tracker()
        await tracker.track()

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "trackEvent"
        assert span.attributes["stats.requests"] == 1
        assert span.attributes["stats.total_jokes"] == 1


class TestGetStats:
    @pytest.mark.asyncio
    async def test_uptime_is_time_since_last_update(
        self, make_tracker, clock: FakeClock
    ) -> None:
        tracker = make_tracker(clock)
        clock.advance(10)
        await tracker.track()
        clock.advance(3)

        stats = await tracker.get_stats()

        assert stats.last_update == START + timedelta(seconds=10)
        assert stats.uptime_seconds == pytest.approx(3.0)

    @pytest.mark.asyncio
    async def test_get_stats_does_not_modify(self, make_tracker) -> None:
        tracker = make_tracker()
        await tracker.track()

        first = await tracker.get_stats()
        second = await tracker.get_stats()

        assert first.total_requests == second.total_requests == 1

    @pytest.mark.asyncio
    async def test_get_stats_records_span(
        self, make_tracker, span_exporter: InMemorySpanExporter
    ) -> None:
        tracker = make_tracker()
        await tracker.get_stats()

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "getStats"
