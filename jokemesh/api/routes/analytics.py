"""Analytics service routes.

``POST /internal/track`` is called by the jokes service, never by end users;
it ignores its body and always answers ``{"status": "tracked"}``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from jokemesh.core.clock import format_rfc3339
from jokemesh.core.constants import STATS_PATH, TRACK_PATH
from jokemesh.core.logging import get_logger
from jokemesh.services.analytics import AnalyticsTracker


logger = get_logger(__name__)


class TrackResponse(BaseModel):
    status: str = "tracked"


class StatsResponse(BaseModel):
    total_requests: int = Field(description="Track notifications received")
    total_jokes: int = Field(description="Jokes counted; equals total_requests")
    last_update: str = Field(description="Time of the last notification, RFC 3339")
    uptime_seconds: float = Field(description="Seconds since last_update")


router = APIRouter(tags=["analytics"])


def get_tracker(request: Request) -> AnalyticsTracker:
    return request.app.state.tracker


@router.post(TRACK_PATH, response_model=TrackResponse, summary="Count a served joke")
async def track(
    tracker: AnalyticsTracker = Depends(get_tracker),
) -> TrackResponse:
    logger.info("Track event received")
    await tracker.track()
    return TrackResponse()


@router.get(STATS_PATH, response_model=StatsResponse, summary="Joke statistics")
async def stats(
    request: Request,
    tracker: AnalyticsTracker = Depends(get_tracker),
) -> StatsResponse:
    logger.info(
        "Stats requested",
        client_ip=request.client.host if request.client else None,
    )
    snapshot = await tracker.get_stats()
    return StatsResponse(
        total_requests=snapshot.total_requests,
        total_jokes=snapshot.total_jokes,
        last_update=format_rfc3339(snapshot.last_update),
        uptime_seconds=snapshot.uptime_seconds,
    )
