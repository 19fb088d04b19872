"""
Domain models for healthy-vitals synthesis.

These models represent the core concepts (bands, regimes, readings) and are
framework-agnostic. Wire-facing models serialize with camelCase aliases so the
stored JSON and the HTTP payloads share one shape.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class VitalSign(str, Enum):
    """Biometric channels the engine synthesizes."""

    HEART_RATE = "heart_rate"
    SPO2 = "spo2"
    TEMPERATURE = "temperature"
    RED = "red"
    IR = "ir"
    GLUCOSE = "glucose"


class CirculatoryRegime(str, Enum):
    """Heart-rate regime derived from the hour of day."""

    RESTING = "resting"
    ACTIVE = "active"
    NEUTRAL = "neutral"


class ThermalRegime(str, Enum):
    """Body-temperature regime derived from the hour of day."""

    MORNING = "morning"
    EVENING = "evening"
    DAYTIME = "daytime"


class GlucoseRegime(str, Enum):
    """Meal-related glucose regime derived from the hour of day."""

    FASTING = "fasting"
    POST_MEAL = "post_meal"
    REGULAR = "regular"


class GlucoseMode(str, Enum):
    """
    The two glucose policies the service exposes.

    HISTORY_WALK walks from the device's last glucose inside the strict 70-99 band.
    SINGLE_SHOT is the older stateless prediction clamped to 70-110.
    """

    HISTORY_WALK = "history_walk"
    SINGLE_SHOT = "single_shot"


class InterpretationStatus(str, Enum):
    """Traffic-light status attached to an interpreted value."""

    GOOD = "good"
    CAUTION = "caution"
    WARNING = "warning"
    ERROR = "error"


class VariationBand(BaseModel):
    """Allowed range and minimum step for one vital's next synthesized value."""

    model_config = ConfigDict(frozen=True)

    min_value: float
    max_value: float
    minimum_change: float = Field(gt=0.0)
    decimals: int | None = Field(default=None, ge=0, description="Rounding precision")

    @model_validator(mode="after")
    def min_not_above_max(self) -> "VariationBand":
        if self.min_value > self.max_value:
            raise ValueError(
                f"band min {self.min_value} is above band max {self.max_value}"
            )
        return self

    @property
    def width(self) -> float:
        return self.max_value - self.min_value

    def clamp(self, value: float) -> float:
        return max(self.min_value, min(self.max_value, value))

    def quantize(self, value: float) -> float:
        return value if self.decimals is None else round(value, self.decimals)

    def contains(self, value: float) -> bool:
        return self.min_value <= value <= self.max_value


class RegimeSnapshot(BaseModel):
    """All regime tags for a given hour."""

    model_config = ConfigDict(frozen=True)

    hour: int = Field(ge=0, le=23)
    circulatory: CirculatoryRegime
    thermal: ThermalRegime
    glucose: GlucoseRegime


# Defaults used when a device has no usable history
DEFAULT_HEART_RATE = 72
DEFAULT_SPO2 = 98.0
DEFAULT_TEMPERATURE = 36.5
DEFAULT_GLUCOSE = 85.0

# Looser sanity envelope every stored reading must satisfy
GLOBAL_ENVELOPE: dict[VitalSign, tuple[float, float]] = {
    VitalSign.HEART_RATE: (55.0, 95.0),
    VitalSign.SPO2: (95.0, 100.0),
    VitalSign.TEMPERATURE: (36.0, 37.2),
    VitalSign.GLUCOSE: (70.0, 99.0),
}


class LastValues(BaseModel):
    """Most recent known value of each vital for a device."""

    model_config = ConfigDict(frozen=True)

    heart_rate: float = DEFAULT_HEART_RATE
    spo2: float = DEFAULT_SPO2
    temperature: float = DEFAULT_TEMPERATURE
    glucose: float = DEFAULT_GLUCOSE
    red: float | None = None
    ir: float | None = None


class CamelModel(BaseModel):
    """Base for models that travel as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RawSensorReading(CamelModel):
    """A sample as posted by a device. Known vitals are range-checked; extra fields are kept."""

    model_config = ConfigDict(extra="allow")

    device_id: str
    timestamp: str | int | float
    heart_rate: float | None = Field(default=None, ge=0, le=200)
    heart_rate_avg: float | None = Field(default=None, ge=0, le=200)
    spo2: float | None = Field(default=None, ge=70, le=100)
    temperature: float | None = Field(default=None, ge=30, le=45)
    red: float | None = None
    ir: float | None = None


class OriginalValues(CamelModel):
    """Incoming values kept for audit next to the synthesized ones."""

    heart_rate: Any = None
    spo2: Any = None
    temperature: Any = None
    red: Any = None
    ir: Any = None


class SynthesizedVitals(CamelModel):
    """Next-reading vector produced by the vitals synthesizer."""

    model_config = ConfigDict(frozen=True)

    heart_rate: int
    heart_rate_avg: int
    heart_rate_valid: bool = True
    spo2: float
    spo2_valid: bool = True
    temperature: float
    red: int
    ir: int
    finger_detected: bool = True
    simulated_healthy: bool = True
    original_values: OriginalValues


class Reading(CamelModel):
    """One stored record. Immutable once appended to the history store."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    device_id: str
    received_at: datetime
    timestamp: str | int | float | None = None
    heart_rate: int
    heart_rate_avg: int
    heart_rate_valid: bool = True
    spo2: float
    spo2_valid: bool = True
    temperature: float
    red: int
    ir: int
    finger_detected: bool = True
    simulated_healthy: bool = True
    original_values: OriginalValues | None = None
    last_glucose: float | None = None

    def to_record(self) -> dict[str, Any]:
        """JSON-ready mapping as kept by the history store."""
        return self.model_dump(by_alias=True, mode="json")

    def envelope_violations(self) -> list[str]:
        """Names of vitals outside the global plausibility envelope."""
        values: dict[VitalSign, float | None] = {
            VitalSign.HEART_RATE: self.heart_rate,
            VitalSign.SPO2: self.spo2,
            VitalSign.TEMPERATURE: self.temperature,
            VitalSign.GLUCOSE: self.last_glucose,
        }
        violations = []
        for vital, value in values.items():
            if value is None:
                continue
            low, high = GLOBAL_ENVELOPE[vital]
            if not low <= value <= high:
                violations.append(vital.value)
        return violations


class Interpretation(BaseModel):
    """Category lookup result for one value."""

    model_config = ConfigDict(frozen=True)

    category: str
    status: InterpretationStatus
    message: str


HealthStatus = Literal["Excellent", "Good", "Fair", "Poor"]


class HealthScore(BaseModel):
    """Aggregated 0-100 score with the reasons for each deduction."""

    score: int = Field(ge=0, le=100)
    status: HealthStatus
    factors: list[str] = Field(default_factory=list)


class GlucosePrediction(CamelModel):
    """Simulated glucose value with its interpretation."""

    glucose_level: float
    category: str
    status: InterpretationStatus
    message: str
    mode: GlucoseMode


class GlucosePredictionRequest(CamelModel):
    """Vitals submitted for an ad-hoc glucose estimate. Ranges are checked at the boundary."""

    heart_rate: float = Field(ge=0, le=200, description="BPM")
    heart_rate_avg: float | None = Field(default=None, ge=0, le=200)
    spo2: float = Field(ge=70, le=100, description="Percent")
    temperature: float = Field(ge=30, le=45, description="Celsius")
    device_id: str | None = None
    mode: GlucoseMode | None = None
