"""
Vitals synthesizer: turns an incoming raw sample into the next healthy reading.

Every vital walks from the device's last *stored* value. Incoming heart rate,
SpO2 and temperature are only kept for audit; incoming red/IR seed the raw
channels when the device has no stored channel value yet.
"""

from collections.abc import Iterable

import structlog

from vitalsim.domain.models import (
    OriginalValues,
    RawSensorReading,
    SynthesizedVitals,
    VariationBand,
    VitalSign,
)
from vitalsim.services.device_state import DeviceStateLookup, Record
from vitalsim.services.random_walk import BoundedRandomWalk
from vitalsim.services.sources import RandomSource
from vitalsim.services.time_of_day import TimeOfDayPolicy

logger = structlog.get_logger(__name__)


def _channel_start(stored: float | None, incoming: float | None, band: VariationBand) -> float:
    if stored is not None:
        return stored
    if incoming is not None:
        return incoming
    return (band.min_value + band.max_value) / 2


class VitalsSynthesizer:
    """Orchestrates lookup, regime bands and the walk for one reading."""

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
        incoming: RawSensorReading,
        history: Iterable[Record],
        hour: int,
        rng: RandomSource,
    ) -> SynthesizedVitals:
        last = self.lookup.last_values(device_id, history)
        regime = self.policy.regime_for(hour)

        def walk(vital: VitalSign, previous: float) -> float:
            return self.walker.next_value(previous, self.policy.band_for(vital, regime), rng)

        heart_rate = int(walk(VitalSign.HEART_RATE, last.heart_rate))
        spo2 = walk(VitalSign.SPO2, last.spo2)
        temperature = walk(VitalSign.TEMPERATURE, last.temperature)

        red_band = self.policy.band_for(VitalSign.RED, regime)
        ir_band = self.policy.band_for(VitalSign.IR, regime)
        red = int(walk(VitalSign.RED, _channel_start(last.red, incoming.red, red_band)))
        ir = int(walk(VitalSign.IR, _channel_start(last.ir, incoming.ir, ir_band)))

        if incoming.heart_rate_avg is not None:
            heart_rate_avg = round((heart_rate + incoming.heart_rate_avg) / 2)
        else:
            heart_rate_avg = heart_rate

        logger.debug(
            "vitals_synthesized",
            device_id=device_id,
            hour=hour,
            circulatory=regime.circulatory.value,
            heart_rate=heart_rate,
            previous_heart_rate=last.heart_rate,
        )

        return SynthesizedVitals(
            heart_rate=heart_rate,
            heart_rate_avg=heart_rate_avg,
            spo2=spo2,
            temperature=temperature,
            red=red,
            ir=ir,
            original_values=OriginalValues(
                heart_rate=incoming.heart_rate,
                spo2=incoming.spo2,
                temperature=incoming.temperature,
                red=incoming.red,
                ir=incoming.ir,
            ),
        )
