"""
Tests for the two glucose policies.

Covers:
- History walk from the device's last glucose, with correlation nudges
- Strict 70-99 bound for any vitals and any previous value (property-based)
- Single-shot estimate and its wider 70-110 clamp
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vitalsim.services.glucose import GlucoseSynthesizer
from vitalsim.services.sources import SeededRandomSource

NOON = 12


def _history(glucose: float) -> list[dict]:
    return [{"deviceId": "d1", "receivedAt": "2024-06-01T11:00:00Z", "lastGlucose": glucose}]


class TestHistoryWalk:
    def test_walks_from_default_without_history(self, scripted) -> None:
        glucose = GlucoseSynthesizer().synthesize(
            "d1", 72, 72, 98.0, 36.8, [], NOON, scripted([0.9])
        )
        # 85 + 0.5 step + 0.4 jitter, no nudges for mid-range vitals
        assert glucose == pytest.approx(85.9)

    def test_walks_from_last_stored_glucose(self, scripted) -> None:
        glucose = GlucoseSynthesizer().synthesize(
            "d1", 72, 72, 98.0, 36.8, _history(90.0), NOON, scripted([0.9])
        )
        assert glucose == pytest.approx(90.9)

    def test_high_heart_rate_and_temperature_nudge_upward(self, scripted) -> None:
        baseline = GlucoseSynthesizer().synthesize(
            "d1", 72, 72, 98.0, 36.8, _history(85.0), NOON, scripted([0.5])
        )
        nudged = GlucoseSynthesizer().synthesize(
            "d1", 90, 90, 96.0, 37.1, _history(85.0), NOON, scripted([0.5])
        )
        # +0.5*2 (heart rate) +0.5*1.5 (temperature) +0.5 (spo2), then rounded
        assert nudged == pytest.approx(baseline + 2.25, abs=0.06)

    def test_previous_at_ceiling_stays_within_strict_band(self, scripted) -> None:
        glucose = GlucoseSynthesizer().synthesize(
            "d1", 90, 90, 96.0, 37.1, _history(99.0), NOON, scripted([0.9])
        )
        assert 70 <= glucose <= 99

    @given(
        heart_rate=st.floats(min_value=0, max_value=200),
        spo2=st.floats(min_value=70, max_value=100),
        temperature=st.floats(min_value=30, max_value=45),
        previous=st.floats(min_value=70, max_value=99),
        hour=st.integers(min_value=0, max_value=23),
        seed=st.integers(min_value=0, max_value=2**32 - 1),
    )
    def test_output_always_within_strict_band(
        self,
        heart_rate: float,
        spo2: float,
        temperature: float,
        previous: float,
        hour: int,
        seed: int,
    ) -> None:
        """Property-based test: nudges never push glucose out of 70-99."""
        glucose = GlucoseSynthesizer().synthesize(
            "d1",
            heart_rate,
            heart_rate,
            spo2,
            temperature,
            _history(previous),
            hour,
            SeededRandomSource(seed),
        )
        assert 70 <= glucose <= 99
        assert round(glucose, 1) == glucose


class TestSingleShot:
    def test_regular_hour_mid_range_vitals(self, scripted) -> None:
        # 80 + 0.5*15 base, no variation, zero noise
        assert GlucoseSynthesizer().single_shot(72, 72, 98.0, 36.8, 15, scripted([0.5])) == 87.5

    def test_clamped_to_upper_bound(self, scripted) -> None:
        assert GlucoseSynthesizer().single_shot(90, 90, 96.0, 37.1, NOON, scripted([0.9])) == 110.0

    def test_clamped_to_lower_bound(self, scripted) -> None:
        assert GlucoseSynthesizer().single_shot(60, 60, 98.0, 36.0, 3, scripted([0.0])) == 70.0

    def test_ignores_device_history(self) -> None:
        first = GlucoseSynthesizer().single_shot(72, 72, 98.0, 36.8, NOON, SeededRandomSource(5))
        second = GlucoseSynthesizer().single_shot(72, 72, 98.0, 36.8, NOON, SeededRandomSource(5))
        assert first == second
