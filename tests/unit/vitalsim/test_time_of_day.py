"""
Tests for the time-of-day policy.

Covers:
- Regime selection at the documented hours and window edges
- One band per vital for every hour of the day
- Rejection of hours outside 0..23
"""

import pytest

from vitalsim.domain.models import (
    CirculatoryRegime,
    GlucoseRegime,
    ThermalRegime,
    VitalSign,
)
from vitalsim.services.time_of_day import TimeOfDayPolicy


@pytest.fixture
def policy() -> TimeOfDayPolicy:
    return TimeOfDayPolicy()


@pytest.mark.parametrize(
    ("hour", "expected"),
    [
        (23, (55, 75, 1)),
        (12, (65, 90, 1)),
        (20, (60, 95, 1)),
        (18, (65, 90, 1)),
        (19, (60, 95, 1)),
        (6, (55, 75, 1)),
        (7, (60, 95, 1)),
        (9, (65, 90, 1)),
        (22, (55, 75, 1)),
    ],
)
def test_heart_rate_band_by_hour(
    policy: TimeOfDayPolicy, hour: int, expected: tuple[int, int, int]
) -> None:
    band = policy.band_for(VitalSign.HEART_RATE, policy.regime_for(hour))
    assert (band.min_value, band.max_value, band.minimum_change) == expected


@pytest.mark.parametrize(
    ("hour", "circulatory", "thermal", "glucose"),
    [
        (3, CirculatoryRegime.RESTING, ThermalRegime.DAYTIME, GlucoseRegime.FASTING),
        (6, CirculatoryRegime.RESTING, ThermalRegime.MORNING, GlucoseRegime.FASTING),
        (7, CirculatoryRegime.NEUTRAL, ThermalRegime.MORNING, GlucoseRegime.FASTING),
        (8, CirculatoryRegime.NEUTRAL, ThermalRegime.MORNING, GlucoseRegime.POST_MEAL),
        (11, CirculatoryRegime.ACTIVE, ThermalRegime.DAYTIME, GlucoseRegime.REGULAR),
        (12, CirculatoryRegime.ACTIVE, ThermalRegime.DAYTIME, GlucoseRegime.POST_MEAL),
        (15, CirculatoryRegime.ACTIVE, ThermalRegime.DAYTIME, GlucoseRegime.REGULAR),
        (16, CirculatoryRegime.ACTIVE, ThermalRegime.EVENING, GlucoseRegime.REGULAR),
        (19, CirculatoryRegime.NEUTRAL, ThermalRegime.EVENING, GlucoseRegime.POST_MEAL),
        (21, CirculatoryRegime.NEUTRAL, ThermalRegime.DAYTIME, GlucoseRegime.REGULAR),
        (23, CirculatoryRegime.RESTING, ThermalRegime.DAYTIME, GlucoseRegime.FASTING),
    ],
)
def test_regime_snapshot(
    policy: TimeOfDayPolicy,
    hour: int,
    circulatory: CirculatoryRegime,
    thermal: ThermalRegime,
    glucose: GlucoseRegime,
) -> None:
    regime = policy.regime_for(hour)
    assert regime.hour == hour
    assert regime.circulatory == circulatory
    assert regime.thermal == thermal
    assert regime.glucose == glucose


@pytest.mark.parametrize("hour", range(24))
def test_every_hour_has_exactly_one_band_per_vital(policy: TimeOfDayPolicy, hour: int) -> None:
    bands = policy.bands_for_hour(hour)

    assert set(bands) == set(VitalSign)
    for band in bands.values():
        assert band.min_value <= band.max_value
        assert band.width >= 2 * band.minimum_change


def test_glucose_bands_stay_inside_normal_range(policy: TimeOfDayPolicy) -> None:
    for hour in range(24):
        band = policy.band_for(VitalSign.GLUCOSE, policy.regime_for(hour))
        assert 70 <= band.min_value and band.max_value <= 99


@pytest.mark.parametrize("hour", [-1, 24, 100])
def test_out_of_range_hour_is_rejected(policy: TimeOfDayPolicy, hour: int) -> None:
    with pytest.raises(ValueError, match="0..23"):
        policy.regime_for(hour)
