"""Joke catalog and selection.

The catalog is a fixed, ordered, non-empty list loaded at process start.
Selection is uniform at random and optionally preceded by a 0-49 ms sleep
that stands in for real lookup cost, so latency histograms have something
to show.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Iterator, Sequence

from opentelemetry.trace import Tracer

from jokemesh.core.constants import MAX_SIMULATED_LATENCY_MS
from jokemesh.core.exceptions import ConfigurationError
from jokemesh.core.logging import get_logger
from jokemesh.observability.metrics import JokesInstruments, elapsed_ms


logger = get_logger(__name__)


DEFAULT_JOKES: tuple[str, ...] = (
    "Why do programmers hate nature? It has too many bugs.",
    "I told my computer I needed a break, and it said 'No problem — I'll go to sleep.'",
    "Debugging is like being the detective in a crime movie where you are also the murderer.",
    "Why do Java developers wear glasses? Because they don't C#.",
    "To understand recursion, you must first understand recursion.",
    "There are 10 types of people: those who understand binary and those who don't.",
    "Why did the programmer quit? Because they didn't get arrays.",
    "A SQL query walks into a bar, walks up to two tables and asks: 'Can I join you?'",
)


class JokeCatalog:
    """Immutable, non-empty list of jokes.

    Emptiness is rejected here, at construction, so ``pick`` never needs to
    guard against it.
    """

    def __init__(
        self,
        jokes: Sequence[str] = DEFAULT_JOKES,
        rng: random.Random | None = None,
    ) -> None:
        if not jokes:
            raise ConfigurationError("Joke catalog must not be empty", setting="jokes")
        self._jokes = tuple(jokes)
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._jokes)

    def __contains__(self, joke: object) -> bool:
        return joke in self._jokes

    def __iter__(self) -> Iterator[str]:
        return iter(self._jokes)

    def pick(self) -> str:
        """Return one joke, chosen uniformly at random."""
        return self._jokes[self._rng.randrange(len(self._jokes))]

    def simulated_delay_ms(self) -> int:
        return self._rng.randrange(MAX_SIMULATED_LATENCY_MS)


class JokeSelector:
    """Picks jokes inside a ``getRandomJoke`` span and records their latency."""

    def __init__(
        self,
        catalog: JokeCatalog,
        tracer: Tracer,
        instruments: JokesInstruments,
        simulate_latency: bool = True,
    ) -> None:
        self.catalog = catalog
        self._tracer = tracer
        self._instruments = instruments
        self._simulate_latency = simulate_latency

    async def get_random_joke(self) -> str:
        with self._tracer.start_as_current_span("getRandomJoke") as span:
            start = time.perf_counter()

            if self._simulate_latency:
                await asyncio.sleep(self.catalog.simulated_delay_ms() / 1000.0)

            joke = self.catalog.pick()

            span.set_attribute("joke.content", joke)
            span.set_attribute("joke.length", len(joke))

            duration_ms = elapsed_ms(start)
            self._instruments.joke_latency.record(duration_ms)

            logger.info(
                "Joke retrieved",
                joke_length=len(joke),
                duration_ms=round(duration_ms, 3),
            )
            return joke
