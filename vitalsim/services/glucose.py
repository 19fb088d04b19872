"""
Simulated glucose.

Two policies live side by side and are deliberately not merged:

* ``GlucoseMode.HISTORY_WALK``: walk from the device's last glucose inside the
  regime band, add small correlation nudges from the other vitals, clamp to
  the strict 70-99 normal band.
* ``GlucoseMode.SINGLE_SHOT``: stateless draw from a regime-dependent base,
  fixed vital-driven offsets and noise, clamped to the wider 70-110 band.
"""

from collections.abc import Iterable

import structlog

from vitalsim.domain.models import GlucoseRegime, VitalSign
from vitalsim.services.device_state import DeviceStateLookup, Record
from vitalsim.services.random_walk import BoundedRandomWalk
from vitalsim.services.sources import RandomSource
from vitalsim.services.time_of_day import TimeOfDayPolicy

logger = structlog.get_logger(__name__)

STRICT_GLUCOSE_RANGE = (70.0, 99.0)
SINGLE_SHOT_GLUCOSE_RANGE = (70.0, 110.0)

# (offset, spread) of the single-shot base draw per regime
SINGLE_SHOT_BASES: dict[GlucoseRegime, tuple[float, float]] = {
    GlucoseRegime.FASTING: (75.0, 20.0),
    GlucoseRegime.POST_MEAL: (85.0, 25.0),
    GlucoseRegime.REGULAR: (80.0, 15.0),
}


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


class GlucoseSynthesizer:
    """Glucose estimates correlated with the synthesized vitals."""

    def __init__(
        self,
        walker: BoundedRandomWalk | None = None,
        policy: TimeOfDayPolicy | None = None,
        lookup: DeviceStateLookup | None = None,
    ) -> None:
        self.walker = walker or BoundedRandomWalk()
        self.policy = policy or TimeOfDayPolicy()
        self.lookup = lookup or DeviceStateLookup()

    def synthesize(
        self,
        device_id: str,
        heart_rate: float,
        heart_rate_avg: float,
        spo2: float,
        temperature: float,
        history: Iterable[Record],
        hour: int,
        rng: RandomSource,
    ) -> float:
        """History-walk mode: next glucose for ``device_id``, always within 70-99."""
        last = self.lookup.last_values(device_id, history)
        regime = self.policy.regime_for(hour)
        band = self.policy.band_for(VitalSign.GLUCOSE, regime)

        base = self.walker.next_value(last.glucose, band, rng)
        nudge = self._correlation_nudge(heart_rate, spo2, temperature, rng)
        glucose = round(_clamp(base + nudge, STRICT_GLUCOSE_RANGE), 1)

        logger.debug(
            "glucose_walked",
            device_id=device_id,
            regime=regime.glucose.value,
            previous=last.glucose,
            base=base,
            nudge=round(nudge, 3),
            glucose=glucose,
        )
        return glucose

    def single_shot(
        self,
        heart_rate: float,
        heart_rate_avg: float,
        spo2: float,
        temperature: float,
        hour: int,
        rng: RandomSource,
    ) -> float:
        """Single-shot mode: stateless estimate clamped to 70-110."""
        regime = self.policy.regime_for(hour)
        offset, spread = SINGLE_SHOT_BASES[regime.glucose]
        base = offset + rng.uniform() * spread

        variation = 0.0
        if heart_rate > 80:
            variation += 2
        elif heart_rate < 65:
            variation -= 2

        if temperature > 37.0:
            variation += 3
        elif temperature < 36.5:
            variation -= 1

        if spo2 < 97:
            variation += 1

        noise = (rng.uniform() - 0.5) * 4
        return round(_clamp(base + variation + noise, SINGLE_SHOT_GLUCOSE_RANGE), 1)

    @staticmethod
    def _correlation_nudge(
        heart_rate: float, spo2: float, temperature: float, rng: RandomSource
    ) -> float:
        nudge = 0.0
        if heart_rate > 85:
            nudge += rng.uniform() * 2
        elif heart_rate < 65:
            nudge -= rng.uniform() * 2

        if temperature > 37.0:
            nudge += rng.uniform() * 1.5
        elif temperature < 36.5:
            nudge -= rng.uniform() * 1

        if spo2 < 97:
            nudge += rng.uniform() * 1
        return nudge
