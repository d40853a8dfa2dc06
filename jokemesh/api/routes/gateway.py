"""API gateway routes.

Each route forwards the inbound request, method and body unchanged, to a
fixed path on one backend and relays the backend's status and body:

    GET  /api/v1/joke      -> jokes service
    POST /api/v1/favorite  -> user service
    GET  /api/v1/stats     -> analytics service
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from jokemesh.core.config import GatewaySettings
from jokemesh.core.constants import FAVORITE_PATH, JOKE_PATH, STATS_PATH
from jokemesh.services.proxy import ServiceProxy


router = APIRouter(tags=["gateway"])

JSON_MEDIA_TYPE = "application/json"


def get_proxy(request: Request) -> ServiceProxy:
    return request.app.state.proxy


def get_settings(request: Request) -> GatewaySettings:
    return request.app.state.settings


async def _relay(
    request: Request,
    proxy: ServiceProxy,
    service_address: str,
    path: str,
) -> Response:
    body = await request.body()
    proxied = await proxy.forward(request.method, service_address, path, body)
    return Response(
        content=proxied.body,
        status_code=proxied.status_code,
        media_type=JSON_MEDIA_TYPE,
    )


@router.get(JOKE_PATH, summary="Random joke (proxied to the jokes service)")
async def proxy_joke(
    request: Request,
    proxy: ServiceProxy = Depends(get_proxy),
    settings: GatewaySettings = Depends(get_settings),
) -> Response:
    return await _relay(request, proxy, settings.jokes_service_url, JOKE_PATH)


@router.post(FAVORITE_PATH, summary="Add a favorite (proxied to the user service)")
async def proxy_favorite(
    request: Request,
    proxy: ServiceProxy = Depends(get_proxy),
    settings: GatewaySettings = Depends(get_settings),
) -> Response:
    return await _relay(request, proxy, settings.user_service_url, FAVORITE_PATH)


@router.get(STATS_PATH, summary="Joke statistics (proxied to the analytics service)")
async def proxy_stats(
    request: Request,
    proxy: ServiceProxy = Depends(get_proxy),
    settings: GatewaySettings = Depends(get_settings),
) -> Response:
    return await _relay(request, proxy, settings.analytics_service_url, STATS_PATH)
