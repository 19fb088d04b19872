"""Health score aggregation over interpreted vitals and glucose."""

from collections.abc import Mapping

from vitalsim.domain.models import (
    HealthScore,
    HealthStatus,
    Interpretation,
    InterpretationStatus,
)

VITAL_DEDUCTIONS: dict[InterpretationStatus, int] = {
    InterpretationStatus.WARNING: 20,
    InterpretationStatus.CAUTION: 10,
    InterpretationStatus.ERROR: 15,
}

GLUCOSE_DEDUCTIONS: dict[InterpretationStatus, int] = {
    InterpretationStatus.WARNING: 15,
    InterpretationStatus.CAUTION: 8,
}


def status_label(score: int) -> HealthStatus:
    if score < 60:
        return "Poor"
    if score < 75:
        return "Fair"
    if score < 90:
        return "Good"
    return "Excellent"


class HealthScorer:
    """Start at 100 and deduct once per vital according to its status."""

    def score(
        self,
        vitals: Mapping[str, Interpretation],
        glucose: Interpretation | None = None,
    ) -> HealthScore:
        score = 100
        factors: list[str] = []

        for vital, interpretation in vitals.items():
            deduction = VITAL_DEDUCTIONS.get(interpretation.status, 0)
            if deduction:
                score -= deduction
                factors.append(f"{vital}: {interpretation.message}")

        if glucose is not None:
            deduction = GLUCOSE_DEDUCTIONS.get(glucose.status, 0)
            if deduction:
                score -= deduction
                factors.append(f"Glucose: {glucose.message}")

        score = max(0, score)
        return HealthScore(score=score, status=status_label(score), factors=factors)
