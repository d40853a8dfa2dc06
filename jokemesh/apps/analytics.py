"""Analytics service: counts served jokes and reports aggregate stats."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from jokemesh.api.routes.analytics import router as analytics_router
from jokemesh.apps.base import build_app, service_lifespan
from jokemesh.core.config import AnalyticsSettings, get_analytics_settings
from jokemesh.observability.metrics import AnalyticsInstruments
from jokemesh.observability.telemetry import Telemetry
from jokemesh.services.analytics import AnalyticsTracker


APP_DESCRIPTION = "Joke usage counters"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    async with service_lifespan(app):
        app.state.tracker = AnalyticsTracker(
            app.state.telemetry.tracer,
            app.state.instruments,
        )
        yield


def create_app(
    settings: AnalyticsSettings | None = None,
    *,
    telemetry: Telemetry | None = None,
) -> FastAPI:
    settings = settings or get_analytics_settings()
    owns_telemetry = telemetry is None
    if telemetry is None:
        telemetry = Telemetry.from_settings(settings)

    app = build_app(
        settings,
        telemetry,
        lifespan=lifespan,
        routers=[analytics_router],
        description=APP_DESCRIPTION,
        owns_telemetry=owns_telemetry,
    )
    app.state.instruments = AnalyticsInstruments.create(telemetry.meter)
    return app
