"""Application assembly shared by all four services.

Patterns applied:
- asynccontextmanager lifespan (not the deprecated @app.on_event)
- configure_logging() called ONCE in lifespan startup
- TracingMiddleware outermost so every handler span has a SERVER parent
- Docs disabled in production
"""

from collections.abc import AsyncGenerator, Callable, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import APIRouter, FastAPI
from starlette.middleware import Middleware

from jokemesh.api.error_handlers import register_exception_handlers
from jokemesh.api.routes.health import router as health_router
from jokemesh.core.config import Settings
from jokemesh.core.logging import configure_logging, get_logger
from jokemesh.observability.telemetry import Telemetry
from jokemesh.observability.tracing import TracingMiddleware


logger = get_logger(__name__)

Lifespan = Callable[[FastAPI], AbstractAsyncContextManager[None]]


def build_app(
    settings: Settings,
    telemetry: Telemetry,
    *,
    lifespan: Lifespan,
    routers: Sequence[APIRouter],
    description: str,
    middleware: Sequence[Middleware] = (),
    owns_telemetry: bool = False,
) -> FastAPI:
    """Create a service app with tracing, health check and error handlers.

    Args:
        settings: The service's settings; stored on ``app.state.settings``.
        telemetry: Tracer/meter bundle for the service.
        lifespan: Service-specific lifespan, usually wrapping service_lifespan.
        routers: Service routers, included after the health router.
        description: OpenAPI description.
        middleware: Extra middleware, placed inside the tracing middleware.
        owns_telemetry: Shut telemetry down when the app stops.

    Returns:
        Configured FastAPI application.
    """
    docs_enabled = settings.environment != "production"

    app = FastAPI(
        title=settings.service_name,
        description=description,
        version=settings.service_version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        lifespan=lifespan,
        middleware=[
            Middleware(TracingMiddleware, tracer=telemetry.tracer),
            *middleware,
        ],
    )

    app.include_router(health_router)
    for router in routers:
        app.include_router(router)

    register_exception_handlers(app)

    app.state.settings = settings
    app.state.service_name = settings.service_name
    app.state.telemetry = telemetry
    app.state.owns_telemetry = owns_telemetry
    app.state.initialized = False

    return app


@asynccontextmanager
async def service_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown steps common to every service.

    Yields:
        None after startup, before shutdown.
    """
    settings: Settings = app.state.settings

    configure_logging(level=settings.log_level, service_name=settings.service_name)

    logger.info(
        "Application starting",
        service=settings.service_name,
        version=settings.service_version,
        environment=settings.environment,
        port=settings.port,
    )
    app.state.initialized = True

    try:
        yield
    finally:
        logger.info("Application shutting down", service=settings.service_name)
        app.state.initialized = False
        if app.state.owns_telemetry:
            app.state.telemetry.shutdown()
