"""
Time-of-day regimes and the variation band each vital gets under them.

Regime checks run in a fixed order (resting/fasting first, then
active/post-meal, then the default); hour windows are inclusive on both ends.
"""

from vitalsim.domain.models import (
    CirculatoryRegime,
    GlucoseRegime,
    RegimeSnapshot,
    ThermalRegime,
    VariationBand,
    VitalSign,
)

HEART_RATE_BANDS: dict[CirculatoryRegime, VariationBand] = {
    CirculatoryRegime.RESTING: VariationBand(
        min_value=55, max_value=75, minimum_change=1, decimals=0
    ),
    CirculatoryRegime.ACTIVE: VariationBand(
        min_value=65, max_value=90, minimum_change=1, decimals=0
    ),
    CirculatoryRegime.NEUTRAL: VariationBand(
        min_value=60, max_value=95, minimum_change=1, decimals=0
    ),
}

TEMPERATURE_BANDS: dict[ThermalRegime, VariationBand] = {
    ThermalRegime.MORNING: VariationBand(
        min_value=36.0, max_value=36.8, minimum_change=0.1, decimals=2
    ),
    ThermalRegime.EVENING: VariationBand(
        min_value=36.5, max_value=37.2, minimum_change=0.1, decimals=2
    ),
    ThermalRegime.DAYTIME: VariationBand(
        min_value=36.1, max_value=37.2, minimum_change=0.1, decimals=2
    ),
}

GLUCOSE_BANDS: dict[GlucoseRegime, VariationBand] = {
    GlucoseRegime.FASTING: VariationBand(
        min_value=75, max_value=95, minimum_change=0.5, decimals=1
    ),
    GlucoseRegime.POST_MEAL: VariationBand(
        min_value=80, max_value=99, minimum_change=0.5, decimals=1
    ),
    GlucoseRegime.REGULAR: VariationBand(
        min_value=75, max_value=99, minimum_change=0.5, decimals=1
    ),
}

SPO2_BAND = VariationBand(min_value=95, max_value=100, minimum_change=0.5, decimals=1)
RED_BAND = VariationBand(min_value=75000, max_value=120000, minimum_change=1000, decimals=0)
IR_BAND = VariationBand(min_value=80000, max_value=120000, minimum_change=1000, decimals=0)

POST_MEAL_WINDOWS: tuple[tuple[int, int], ...] = ((8, 10), (12, 14), (18, 20))


def circulatory_regime(hour: int) -> CirculatoryRegime:
    if hour >= 22 or hour <= 6:
        return CirculatoryRegime.RESTING
    if 9 <= hour <= 18:
        return CirculatoryRegime.ACTIVE
    return CirculatoryRegime.NEUTRAL


def thermal_regime(hour: int) -> ThermalRegime:
    if 6 <= hour <= 10:
        return ThermalRegime.MORNING
    if 16 <= hour <= 20:
        return ThermalRegime.EVENING
    return ThermalRegime.DAYTIME


def glucose_regime(hour: int) -> GlucoseRegime:
    if hour >= 22 or hour <= 7:
        return GlucoseRegime.FASTING
    if any(start <= hour <= end for start, end in POST_MEAL_WINDOWS):
        return GlucoseRegime.POST_MEAL
    return GlucoseRegime.REGULAR


class TimeOfDayPolicy:
    """Maps an hour to regime tags and regime tags to variation bands."""

    def regime_for(self, hour: int) -> RegimeSnapshot:
        if not 0 <= hour <= 23:
            raise ValueError(f"hour must be within 0..23, got {hour}")
        return RegimeSnapshot(
            hour=hour,
            circulatory=circulatory_regime(hour),
            thermal=thermal_regime(hour),
            glucose=glucose_regime(hour),
        )

    def band_for(self, vital: VitalSign, regime: RegimeSnapshot) -> VariationBand:
        if vital == VitalSign.HEART_RATE:
            return HEART_RATE_BANDS[regime.circulatory]
        elif vital == VitalSign.SPO2:
            return SPO2_BAND
        elif vital == VitalSign.TEMPERATURE:
            return TEMPERATURE_BANDS[regime.thermal]
        elif vital == VitalSign.RED:
            return RED_BAND
        elif vital == VitalSign.IR:
            return IR_BAND
        elif vital == VitalSign.GLUCOSE:
            return GLUCOSE_BANDS[regime.glucose]
        raise ValueError(f"Unknown vital: {vital}")

    def bands_for_hour(self, hour: int) -> dict[VitalSign, VariationBand]:
        """Every vital's band for ``hour``."""
        regime = self.regime_for(hour)
        return {vital: self.band_for(vital, regime) for vital in VitalSign}
