"""Shared test doubles: scripted random source, pinned clock, wired service."""

from collections.abc import Iterable
from datetime import UTC, datetime
from itertools import cycle

import pytest

from vitalsim.services.health_data import HealthDataService
from vitalsim.services.history import InMemoryHistoryStore
from vitalsim.services.sources import FixedClock, SeededRandomSource


class ScriptedRandom:
    """Replays the given draws in order, cycling when exhausted."""

    def __init__(self, draws: Iterable[float]) -> None:
        self.draws = list(draws)
        self._iter = cycle(self.draws)
        self.calls = 0

    def uniform(self) -> float:
        self.calls += 1
        return next(self._iter)


NOON = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOON)


@pytest.fixture
def store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def service(store: InMemoryHistoryStore, clock: FixedClock) -> HealthDataService:
    return HealthDataService(store=store, rng=SeededRandomSource(1234), clock=clock)


@pytest.fixture
def scripted() -> type[ScriptedRandom]:
    """The ScriptedRandom class, so tests can build sources with their own draws."""
    return ScriptedRandom
