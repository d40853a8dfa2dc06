"""Fire-and-forget notifications from the jokes service to analytics.

Each served joke triggers a POST to ``/internal/track``. The request runs as
its own asyncio task: the jokes response never waits for it, a client
disconnect does not cancel it, and its failure is logged as a warning and
otherwise ignored. The only bound on its lifetime is its own timeout.
"""

from __future__ import annotations

import asyncio

import httpx
from opentelemetry.trace import SpanKind, Tracer

from jokemesh.core.constants import (
    JOKE_LENGTH_HEADER,
    NOTIFY_TIMEOUT_SECONDS,
    TRACK_PATH,
)
from jokemesh.core.logging import get_logger
from jokemesh.observability.tracing import inject_trace_context
from jokemesh.services.proxy import build_service_url


logger = get_logger(__name__)


class AnalyticsNotifier:
    """Dispatches track notifications without blocking the caller.

    Pending tasks are referenced from ``_tasks`` until they finish, so the
    event loop cannot garbage-collect them mid-flight.

    Example:
        notifier = AnalyticsNotifier(client, "analytics:8082", tracer)
        notifier.notify(joke)      # returns immediately
        await notifier.aclose()    # waits for in-flight notifications
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        analytics_address: str,
        tracer: Tracer,
        timeout: float = NOTIFY_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._url = build_service_url(analytics_address, TRACK_PATH)
        self._tracer = tracer
        self._timeout = timeout
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def url(self) -> str:
        return self._url

    @property
    def pending(self) -> int:
        """Number of notifications still in flight."""
        return len(self._tasks)

    def notify(self, joke: str) -> asyncio.Task[None]:
        """Schedule a track notification for ``joke`` and return at once.

        Trace context is captured now, from the caller's span, and carried
        into the background request's headers.
        """
        with self._tracer.start_as_current_span(
            "notifyAnalytics", kind=SpanKind.PRODUCER
        ) as span:
            span.set_attribute("analytics.url", self._url)
            headers = inject_trace_context({JOKE_LENGTH_HEADER: str(len(joke))})
            task = asyncio.create_task(self._send(headers), name="notify-analytics")

        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _send(self, headers: dict[str, str]) -> None:
        try:
            response = await asyncio.wait_for(
                self._client.post(self._url, headers=headers),
                timeout=self._timeout,
            )
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            logger.warning(
                "Failed to notify analytics",
                target=self._url,
                error=str(e) or type(e).__name__,
            )
            return

        logger.debug(
            "Analytics notified",
            target=self._url,
            status_code=response.status_code,
        )

    async def drain(self) -> None:
        """Wait for every in-flight notification to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Drain pending notifications, then close the HTTP client."""
        await self.drain()
        await self._client.aclose()
