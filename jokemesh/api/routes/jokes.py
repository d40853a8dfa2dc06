"""Jokes service routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from jokemesh.core.clock import format_rfc3339, utcnow
from jokemesh.core.constants import JOKE_PATH
from jokemesh.core.logging import get_logger
from jokemesh.observability.metrics import JokesInstruments
from jokemesh.services.jokes import JokeSelector
from jokemesh.services.notifier import AnalyticsNotifier


logger = get_logger(__name__)


class JokeResponse(BaseModel):
    joke: str = Field(description="Joke text")
    service: str = Field(description="Name of the serving service", examples=["jokes-service"])
    timestamp: str = Field(description="Serving time, RFC 3339")


router = APIRouter(tags=["jokes"])


def get_selector(request: Request) -> JokeSelector:
    return request.app.state.joke_selector


def get_notifier(request: Request) -> AnalyticsNotifier:
    return request.app.state.notifier


def get_instruments(request: Request) -> JokesInstruments:
    return request.app.state.instruments


@router.get(JOKE_PATH, response_model=JokeResponse, summary="Random joke")
async def get_joke(
    request: Request,
    selector: JokeSelector = Depends(get_selector),
    notifier: AnalyticsNotifier = Depends(get_notifier),
    instruments: JokesInstruments = Depends(get_instruments),
) -> JokeResponse:
    """Serve a random joke and tell analytics about it in the background."""
    logger.info(
        "Joke requested",
        client_ip=request.client.host if request.client else None,
    )

    joke = await selector.get_random_joke()
    instruments.jokes_served.add(1)

    response = JokeResponse(
        joke=joke,
        service=request.app.state.service_name,
        timestamp=format_rfc3339(utcnow()),
    )

    notifier.notify(joke)
    return response
