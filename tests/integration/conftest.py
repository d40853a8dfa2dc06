"""Integration fixtures: the whole mesh in one event loop.

Every service runs its real lifespan; inter-service HTTP goes through
RoutingTransport, which hands each request to the ASGI app registered for
its host instead of opening a socket.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import AsyncExitStack
from dataclasses import dataclass

import httpx
import pytest
from fastapi import FastAPI
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from jokemesh.apps import analytics, gateway, jokes, user


JOKES_HOST = "jokes.test"
USER_HOST = "user.test"
ANALYTICS_HOST = "analytics.test"
GATEWAY_BASE_URL = "http://gateway.test"


class RoutingTransport(httpx.AsyncBaseTransport):
    """Dispatch requests to in-process ASGI apps by host name.

    Unknown hosts fail like an unreachable peer.
    """

    def __init__(self) -> None:
        self._routes: dict[str, httpx.ASGITransport] = {}

    def register(self, host: str, app: FastAPI) -> None:
        self._routes[host] = httpx.ASGITransport(app=app)

    def unregister(self, host: str) -> None:
        self._routes.pop(host, None)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        transport = self._routes.get(request.url.host)
        if transport is None:
            raise httpx.ConnectError(f"No route to {request.url.host}", request=request)
        return await transport.handle_async_request(request)


@dataclass
class Mesh:
    client: httpx.AsyncClient
    routes: RoutingTransport
    gateway: FastAPI
    jokes: FastAPI
    analytics: FastAPI
    user: FastAPI
    readers: dict[str, InMemoryMetricReader]


@pytest.fixture
async def mesh(
    make_telemetry,
    gateway_settings,
    jokes_settings,
    analytics_settings,
    user_settings,
) -> AsyncGenerator[Mesh, None]:
    routes = RoutingTransport()
    readers: dict[str, InMemoryMetricReader] = {}

    def build(name, module, settings, **kwargs) -> FastAPI:
        telemetry, reader = make_telemetry(settings)
        readers[name] = reader
        return module.create_app(settings, telemetry=telemetry, **kwargs)

    analytics_app = build("analytics", analytics, analytics_settings)
    user_app = build("user", user, user_settings)
    jokes_app = build("jokes", jokes, jokes_settings, transport=routes)
    gateway_app = build("gateway", gateway, gateway_settings, transport=routes)

    routes.register(ANALYTICS_HOST, analytics_app)
    routes.register(USER_HOST, user_app)
    routes.register(JOKES_HOST, jokes_app)

    async with AsyncExitStack() as stack:
        # Backends stop last so the jokes service can drain notifications
        for app in (analytics_app, user_app, jokes_app, gateway_app):
            await stack.enter_async_context(app.router.lifespan_context(app))

        client = await stack.enter_async_context(
            httpx.AsyncClient(
                transport=httpx.ASGITransport(app=gateway_app),
                base_url=GATEWAY_BASE_URL,
            )
        )
        yield Mesh(
            client=client,
            routes=routes,
            gateway=gateway_app,
            jokes=jokes_app,
            analytics=analytics_app,
            user=user_app,
            readers=readers,
        )
