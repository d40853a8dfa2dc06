"""User service: stores and lists favorite jokes."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from jokemesh.api.routes.user import router as user_router
from jokemesh.apps.base import build_app, service_lifespan
from jokemesh.core.config import UserSettings, get_user_settings
from jokemesh.observability.metrics import UserInstruments
from jokemesh.observability.telemetry import Telemetry
from jokemesh.services.favorites import FavoritesStore


APP_DESCRIPTION = "Favorite jokes per user"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    async with service_lifespan(app):
        app.state.favorites_store = FavoritesStore(
            app.state.telemetry.tracer,
            app.state.instruments,
        )
        yield


def create_app(
    settings: UserSettings | None = None,
    *,
    telemetry: Telemetry | None = None,
) -> FastAPI:
    settings = settings or get_user_settings()
    owns_telemetry = telemetry is None
    if telemetry is None:
        telemetry = Telemetry.from_settings(settings)

    app = build_app(
        settings,
        telemetry,
        lifespan=lifespan,
        routers=[user_router],
        description=APP_DESCRIPTION,
        owns_telemetry=owns_telemetry,
    )
    app.state.instruments = UserInstruments.create(telemetry.meter)
    return app
