"""Append-only, in-memory favorites list for the user service.

Appends happen under the exclusive lock, so list order is creation order.
Favorite IDs are the creation time at second resolution
(``YYYYMMDDHHMMSS``); two favorites created in the same second share an ID.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from opentelemetry.trace import Tracer

from jokemesh.core.clock import utcnow
from jokemesh.core.logging import get_logger
from jokemesh.observability.metrics import UserInstruments
from jokemesh.services.locks import ReadWriteLock


logger = get_logger(__name__)

FAVORITE_ID_FORMAT = "%Y%m%d%H%M%S"


@dataclass(frozen=True)
class Favorite:
    id: str
    joke: str
    user_id: str
    created_at: datetime


class FavoritesStore:
    """Process-wide favorites sequence. Never updated, never deleted from."""

    def __init__(
        self,
        tracer: Tracer,
        instruments: UserInstruments,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._tracer = tracer
        self._instruments = instruments
        self._clock = clock
        self._favorites: list[Favorite] = []
        self._lock = ReadWriteLock()

    async def add(self, joke: str, user_id: str) -> Favorite:
        """Append a favorite. Callers validate ``joke`` and ``user_id``."""
        with self._tracer.start_as_current_span("addFavorite") as span:
            async with self._lock.write():
                created_at = self._clock()
                favorite = Favorite(
                    id=created_at.strftime(FAVORITE_ID_FORMAT),
                    joke=joke,
                    user_id=user_id,
                    created_at=created_at,
                )
                self._favorites.append(favorite)
                total = len(self._favorites)

            self._instruments.favorites_added.add(1)

            span.set_attribute("favorite.id", favorite.id)
            span.set_attribute("favorite.user_id", favorite.user_id)
            span.set_attribute("favorites.total", total)

            logger.info(
                "Favorite added",
                favorite_id=favorite.id,
                user_id=favorite.user_id,
                total_favorites=total,
            )
            return favorite

    async def get_favorites(self, user_id: str = "") -> list[Favorite]:
        """Favorites of ``user_id`` in insertion order; all of them if empty."""
        with self._tracer.start_as_current_span("getFavorites") as span:
            async with self._lock.read():
                matches = [
                    favorite
                    for favorite in self._favorites
                    if not user_id or favorite.user_id == user_id
                ]

            span.set_attribute("query.user_id", user_id)
            span.set_attribute("results.count", len(matches))

            logger.info("Favorites retrieved", user_id=user_id, count=len(matches))
            return matches

    async def count(self) -> int:
        async with self._lock.read():
            return len(self._favorites)
