"""
Injected collaborators: random source and clock.

Both are Protocols so tests can pass scripted doubles; production wiring uses
``SeededRandomSource`` (unseeded unless configured) and ``SystemClock``.
"""

import random
from datetime import UTC, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo


class RandomSource(Protocol):
    """Uniform draws in [0, 1)."""

    def uniform(self) -> float: ...


class Clock(Protocol):
    """Wall-clock access for timestamps and regime selection."""

    def now(self) -> datetime: ...

    def hour_of_day(self) -> int: ...


class SeededRandomSource:
    """``random.Random`` behind the RandomSource protocol. ``seed=None`` is nondeterministic."""

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._random = random.Random(seed)

    def uniform(self) -> float:
        return self._random.random()


class SystemClock:
    """Real time. Hours are taken in ``timezone`` or the host's local zone."""

    def __init__(self, timezone: str | None = None) -> None:
        self._zone = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        return datetime.now(UTC)

    def hour_of_day(self) -> int:
        if self._zone is not None:
            return datetime.now(self._zone).hour
        return datetime.now().astimezone().hour


class FixedClock:
    """Clock pinned to one instant; ``advance`` moves it forward. Used by the CLI and tests."""

    def __init__(self, now: datetime, hour: int | None = None) -> None:
        self._now = now
        self._hour = hour

    def now(self) -> datetime:
        return self._now

    def hour_of_day(self) -> int:
        return self._now.hour if self._hour is None else self._hour

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)
