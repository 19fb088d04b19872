"""
Bounded random walk with a guaranteed minimum step.

One step from ``previous``:

1. draw a sign, move by ``minimum_change`` in that direction plus a fixed
   uniform(-0.5, 0.5) jitter (independent of band width),
2. clamp into the band and round to the band's precision,
3. if the result moved less than ``minimum_change``, force a step of exactly
   ``minimum_change`` with a freshly drawn sign, clamped again and rounded
   away from ``previous`` so an off-grid ``previous`` cannot shrink the step.

The minimum change is always measured against the unrounded ``previous``.

At a band edge the forced step can clamp straight back onto ``previous``. With
``reflect_at_bounds`` (the default) the walker then steps inward instead.
Without it the no-op is returned unchanged.
"""

import math

import structlog

from vitalsim.domain.models import VariationBand
from vitalsim.services.sources import RandomSource

logger = structlog.get_logger(__name__)

NOISE_AMPLITUDE = 0.5
# Float slack for the minimum-change comparison
_EPSILON = 1e-9
# Digits kept before ceil/floor, so 36.6 * 100 is not read as 3660.0000000000005
_SCALE_DIGITS = 6


class BoundedRandomWalk:
    """Stateless stepper; all randomness comes from the injected source."""

    def __init__(self, reflect_at_bounds: bool = True) -> None:
        self.reflect_at_bounds = reflect_at_bounds

    def next_value(self, previous: float, band: VariationBand, rng: RandomSource) -> float:
        """Return the next value for a vital whose last value was ``previous``."""
        direction = _draw_direction(rng)
        jitter = (rng.uniform() - 0.5) * 2 * NOISE_AMPLITUDE

        candidate = band.quantize(
            band.clamp(previous + direction * band.minimum_change + jitter)
        )
        if _moved_enough(candidate, previous, band):
            return candidate

        return self._forced_step(previous, band, _draw_direction(rng))

    def _forced_step(self, previous: float, band: VariationBand, direction: int) -> float:
        target = _step_away(previous, direction, band)
        if not self.reflect_at_bounds or _moved_enough(target, previous, band):
            return target

        reflected = _step_away(previous, -direction, band)
        if abs(reflected - previous) > abs(target - previous):
            logger.debug(
                "walk_reflected_at_bound",
                previous=previous,
                target=target,
                reflected=reflected,
            )
            return reflected
        return target


def _draw_direction(rng: RandomSource) -> int:
    return -1 if rng.uniform() < 0.5 else 1


def _moved_enough(value: float, previous: float, band: VariationBand) -> bool:
    return abs(value - previous) + _EPSILON >= band.minimum_change


def _step_away(previous: float, direction: int, band: VariationBand) -> float:
    """Clamped step of ``minimum_change``, rounded away from ``previous`` (ceil up, floor down)."""
    value = band.clamp(previous + direction * band.minimum_change)
    if band.decimals is None:
        return value

    scale = 10**band.decimals
    scaled = round(value * scale, _SCALE_DIGITS)
    rounded = math.ceil(scaled) if value >= previous else math.floor(scaled)
    return band.clamp(rounded / scale)
