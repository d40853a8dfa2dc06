"""API gateway: the mesh's single public entry point.

Routes /api/v1/joke, /api/v1/favorite and /api/v1/stats to the jokes, user
and analytics services. Every inbound request is counted and timed by
RequestMetricsMiddleware; every proxied call is timed per backend.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from starlette.middleware import Middleware

from jokemesh.api.routes.gateway import router as gateway_router
from jokemesh.apps.base import build_app, service_lifespan
from jokemesh.core.config import GatewaySettings, get_gateway_settings
from jokemesh.core.constants import PROXY_TIMEOUT_SECONDS
from jokemesh.observability.metrics import GatewayInstruments, RequestMetricsMiddleware
from jokemesh.observability.telemetry import Telemetry
from jokemesh.services.proxy import ServiceProxy


APP_DESCRIPTION = "Public entry point proxying to the jokes, user and analytics services"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    async with service_lifespan(app):
        client = httpx.AsyncClient(
            timeout=PROXY_TIMEOUT_SECONDS,
            transport=app.state.transport,
        )
        app.state.proxy = ServiceProxy(
            client,
            app.state.telemetry.tracer,
            app.state.instruments,
        )
        try:
            yield
        finally:
            await client.aclose()


def create_app(
    settings: GatewaySettings | None = None,
    *,
    telemetry: Telemetry | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the gateway app.

    Args:
        settings: Defaults to the environment-derived GatewaySettings.
        telemetry: Defaults to OTLP pipelines built from settings.
        transport: httpx transport for backend calls (tests route it in-process).
    """
    settings = settings or get_gateway_settings()
    owns_telemetry = telemetry is None
    if telemetry is None:
        telemetry = Telemetry.from_settings(settings)

    instruments = GatewayInstruments.create(telemetry.meter)

    app = build_app(
        settings,
        telemetry,
        lifespan=lifespan,
        routers=[gateway_router],
        description=APP_DESCRIPTION,
        middleware=[Middleware(RequestMetricsMiddleware, instruments=instruments)],
        owns_telemetry=owns_telemetry,
    )
    app.state.instruments = instruments
    app.state.transport = transport
    return app
