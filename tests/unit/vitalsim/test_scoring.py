"""Tests for health score aggregation."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vitalsim.domain.models import Interpretation, InterpretationStatus
from vitalsim.services.interpretation import Interpreter
from vitalsim.services.scoring import HealthScorer, status_label


def _interp(status: InterpretationStatus, message: str = "msg") -> Interpretation:
    return Interpretation(category="x", status=status, message=message)


def test_all_good_scores_100_excellent() -> None:
    interpreter = Interpreter()
    score = HealthScorer().score(interpreter.vitals(72, 98, 36.6), interpreter.glucose(85))

    assert score.score == 100
    assert score.status == "Excellent"
    assert score.factors == []


def test_warning_vital_and_warning_glucose() -> None:
    vitals = {
        "heartRate": _interp(InterpretationStatus.WARNING, "High heart rate (tachycardia)"),
        "spo2": _interp(InterpretationStatus.GOOD),
        "temperature": _interp(InterpretationStatus.GOOD),
    }
    glucose = _interp(InterpretationStatus.WARNING, "Diabetic range - consult healthcare provider")

    score = HealthScorer().score(vitals, glucose)

    assert score.score == 65
    assert score.status == "Fair"
    assert score.factors == [
        "heartRate: High heart rate (tachycardia)",
        "Glucose: Diabetic range - consult healthcare provider",
    ]


def test_error_and_caution_deductions() -> None:
    vitals = {
        "heartRate": _interp(InterpretationStatus.ERROR),
        "spo2": _interp(InterpretationStatus.CAUTION),
        "temperature": _interp(InterpretationStatus.GOOD),
    }

    score = HealthScorer().score(vitals, _interp(InterpretationStatus.CAUTION))

    assert score.score == 100 - 15 - 10 - 8
    assert score.status == "Fair"
    assert len(score.factors) == 3


def test_score_without_glucose() -> None:
    vitals = {"spo2": _interp(InterpretationStatus.CAUTION)}
    assert HealthScorer().score(vitals).score == 90


@pytest.mark.parametrize(
    ("score", "label"),
    [
        (100, "Excellent"),
        (90, "Excellent"),
        (89, "Good"),
        (75, "Good"),
        (74, "Fair"),
        (60, "Fair"),
        (59, "Poor"),
        (0, "Poor"),
    ],
)
def test_status_label(score: int, label: str) -> None:
    assert status_label(score) == label


@given(
    statuses=st.lists(st.sampled_from(list(InterpretationStatus)), min_size=0, max_size=10),
    glucose=st.sampled_from(list(InterpretationStatus)),
)
def test_score_never_negative(statuses: list[InterpretationStatus], glucose) -> None:
    vitals = {f"v{i}": _interp(status) for i, status in enumerate(statuses)}
    score = HealthScorer().score(vitals, _interp(glucose))
    assert 0 <= score.score <= 100
