"""
Threshold tables mapping vital values to category, status and message.

Rows are evaluated top to bottom and the first matching row wins.
"""

from vitalsim.domain.models import Interpretation, InterpretationStatus

GOOD = InterpretationStatus.GOOD
CAUTION = InterpretationStatus.CAUTION
WARNING = InterpretationStatus.WARNING
ERROR = InterpretationStatus.ERROR


class Interpreter:
    """Pure lookups; no state."""

    def heart_rate(self, bpm: float) -> Interpretation:
        if bpm == 0:
            return Interpretation(
                category="No Reading", status=ERROR, message="Sensor not detecting heartbeat"
            )
        if bpm < 60:
            return Interpretation(
                category="Low", status=CAUTION, message="Below normal range (bradycardia)"
            )
        if bpm <= 100:
            return Interpretation(category="Normal", status=GOOD, message="Normal heart rate")
        if bpm <= 120:
            return Interpretation(category="Elevated", status=CAUTION, message="Slightly elevated")
        return Interpretation(
            category="High", status=WARNING, message="High heart rate (tachycardia)"
        )

    def spo2(self, percent: float) -> Interpretation:
        if percent >= 95:
            return Interpretation(
                category="Normal", status=GOOD, message="Normal oxygen saturation"
            )
        if percent >= 90:
            return Interpretation(
                category="Low Normal", status=CAUTION, message="Below normal range"
            )
        return Interpretation(
            category="Low",
            status=WARNING,
            message="Low oxygen saturation - seek medical attention",
        )

    def temperature(self, celsius: float) -> Interpretation:
        if celsius < 35.0:
            return Interpretation(
                category="Hypothermia", status=WARNING, message="Below normal body temperature"
            )
        if celsius <= 37.2:
            return Interpretation(
                category="Normal", status=GOOD, message="Normal body temperature"
            )
        if celsius <= 38.0:
            return Interpretation(
                category="Mild Fever", status=CAUTION, message="Slightly elevated temperature"
            )
        if celsius <= 39.0:
            return Interpretation(category="Fever", status=WARNING, message="Moderate fever")
        return Interpretation(
            category="High Fever",
            status=WARNING,
            message="High fever - seek medical attention",
        )

    def glucose(self, mg_dl: float) -> Interpretation:
        if mg_dl < 70:
            return Interpretation(
                category="Low",
                status=WARNING,
                message="Hypoglycemia - consult healthcare provider",
            )
        if mg_dl < 100:
            return Interpretation(category="Normal", status=GOOD, message="Normal glucose level")
        if mg_dl < 126:
            return Interpretation(
                category="Prediabetes",
                status=CAUTION,
                message="Pre-diabetic range - monitor closely",
            )
        return Interpretation(
            category="Diabetes",
            status=WARNING,
            message="Diabetic range - consult healthcare provider",
        )

    def vitals(
        self, heart_rate: float, spo2: float, temperature: float
    ) -> dict[str, Interpretation]:
        """Interpretations keyed the way score factors and the health view name them."""
        return {
            "heartRate": self.heart_rate(heart_rate),
            "spo2": self.spo2(spo2),
            "temperature": self.temperature(temperature),
        }
