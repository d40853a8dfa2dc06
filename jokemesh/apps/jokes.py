"""Jokes service: serves random jokes and reports each one to analytics."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from jokemesh.api.routes.jokes import router as jokes_router
from jokemesh.apps.base import build_app, service_lifespan
from jokemesh.core.config import JokesSettings, get_jokes_settings
from jokemesh.core.constants import NOTIFY_TIMEOUT_SECONDS
from jokemesh.observability.metrics import JokesInstruments
from jokemesh.observability.telemetry import Telemetry
from jokemesh.services.jokes import JokeCatalog, JokeSelector
from jokemesh.services.notifier import AnalyticsNotifier


APP_DESCRIPTION = "Random programming jokes"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: JokesSettings = app.state.settings
    tracer = app.state.telemetry.tracer

    async with service_lifespan(app):
        app.state.joke_selector = JokeSelector(
            app.state.catalog,
            tracer,
            app.state.instruments,
            simulate_latency=settings.simulate_latency,
        )
        client = httpx.AsyncClient(
            timeout=NOTIFY_TIMEOUT_SECONDS,
            transport=app.state.transport,
        )
        app.state.notifier = AnalyticsNotifier(
            client, settings.analytics_service_url, tracer
        )
        try:
            yield
        finally:
            # In-flight notifications finish (or time out) before telemetry flushes
            await app.state.notifier.aclose()


def create_app(
    settings: JokesSettings | None = None,
    *,
    telemetry: Telemetry | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    catalog: JokeCatalog | None = None,
) -> FastAPI:
    """Build the jokes service app.

    Args:
        settings: Defaults to the environment-derived JokesSettings.
        telemetry: Defaults to OTLP pipelines built from settings.
        transport: httpx transport for analytics notifications.
        catalog: Joke catalog; the built-in jokes by default.
    """
    settings = settings or get_jokes_settings()
    owns_telemetry = telemetry is None
    if telemetry is None:
        telemetry = Telemetry.from_settings(settings)

    app = build_app(
        settings,
        telemetry,
        lifespan=lifespan,
        routers=[jokes_router],
        description=APP_DESCRIPTION,
        owns_telemetry=owns_telemetry,
    )
    app.state.instruments = JokesInstruments.create(telemetry.meter)
    app.state.catalog = catalog or JokeCatalog()
    app.state.transport = transport
    return app
