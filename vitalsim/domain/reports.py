"""
Aggregated per-device health view.

Built by the service from the latest stored reading; serialized with camelCase
aliases and ``exclude_none`` so absent sections disappear from the payload.
"""

from datetime import datetime
from typing import Any

from pydantic import Field

from vitalsim.domain.models import CamelModel, HealthScore, InterpretationStatus, OriginalValues

HEALTH_VIEW_DISCLAIMERS = [
    "This data is for educational purposes only",
    "Glucose values are predicted for educational purposes",
    "Consult healthcare provider for medical decisions",
    "Sensor accuracy may vary based on placement and conditions",
    "Values have been simulated to show healthy ranges",
]

GLUCOSE_DISCLAIMERS = [
    "This is a simulated glucose value for demonstration purposes",
    "Not a substitute for professional medical diagnosis",
    "Consult healthcare provider for medical decisions",
    "Use actual glucose monitoring devices for real measurements",
]


class RawChannels(CamelModel):
    red: int | None = None
    ir: int | None = None
    finger_detected: bool | None = None


class SensorSnapshot(CamelModel):
    timestamp: datetime
    raw: RawChannels


class VitalReport(CamelModel):
    """One interpreted vital."""

    value: float
    unit: str
    category: str
    status: InterpretationStatus
    message: str
    average: int | None = None
    fahrenheit: float | None = None


class VitalsReport(CamelModel):
    heart_rate: VitalReport
    spo2: VitalReport
    temperature: VitalReport


class GlucoseReport(CamelModel):
    value: float
    unit: str = "mg/dL"
    category: str
    status: InterpretationStatus
    message: str
    confidence: str = "Simulated"
    simulated_glucose: bool = True


class QualityIndicators(CamelModel):
    sensor_contact: str
    signal_quality: str
    data_freshness: str


class HistoryEntry(CamelModel):
    timestamp: Any = None
    heart_rate: Any = None
    spo2: Any = None
    temperature: Any = None
    finger_detected: Any = None
    simulated_healthy: Any = None


class HistorySection(CamelModel):
    count: int
    data: list[HistoryEntry]


class HealthView(CamelModel):
    """Everything the health-data endpoint reports for one device."""

    success: bool = True
    timestamp: datetime
    device_id: str
    simulated_healthy: bool
    sensor_data: SensorSnapshot
    vitals: VitalsReport
    glucose: GlucoseReport
    health_score: HealthScore
    quality_indicators: QualityIndicators
    history: HistorySection | None = None
    original_values: OriginalValues | None = None
    disclaimers: list[str] = Field(default_factory=lambda: list(HEALTH_VIEW_DISCLAIMERS))

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def celsius_to_fahrenheit(celsius: float) -> float:
    return round(celsius * 9 / 5 + 32, 1)
