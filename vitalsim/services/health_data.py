"""
Service that orchestrates the complete synthesis pipeline.

incoming raw reading → vitals synthesizer → glucose synthesizer → record
appended to the history store; plus the read side (health view, listings,
export, deletes) over the same store.

FastAPI runs synchronous handlers in a thread pool, so every
read-last-values-then-append sequence, every delete and every random draw
happens under one service lock.
"""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import ValidationError

from vitalsim.config import AppConfig
from vitalsim.domain.errors import InputValidationError, InternalError, NotFoundError
from vitalsim.domain.models import (
    GlucoseMode,
    GlucosePrediction,
    GlucosePredictionRequest,
    RawSensorReading,
    Reading,
)
from vitalsim.domain.reports import (
    GlucoseReport,
    HealthView,
    HistoryEntry,
    HistorySection,
    QualityIndicators,
    RawChannels,
    SensorSnapshot,
    VitalReport,
    VitalsReport,
    celsius_to_fahrenheit,
)
from vitalsim.services.device_state import (
    DeviceStateLookup,
    latest_for_device,
    parse_received_at,
)
from vitalsim.services.export import records_to_csv
from vitalsim.services.glucose import GlucoseSynthesizer
from vitalsim.services.history import HistoryStore, Record
from vitalsim.services.interpretation import Interpreter
from vitalsim.services.random_walk import BoundedRandomWalk
from vitalsim.services.result import Result
from vitalsim.services.scoring import HealthScorer
from vitalsim.services.sources import Clock, RandomSource, SeededRandomSource, SystemClock
from vitalsim.services.time_of_day import TimeOfDayPolicy
from vitalsim.services.vitals import VitalsSynthesizer

logger = structlog.get_logger(__name__)

SIGNAL_STRENGTH_THRESHOLD = 50000


@dataclass
class IngestResult:
    """Outcome of one ingest: the stored reading and the store size after it."""

    reading: Reading
    total_records: int


@dataclass
class GlucosePredictionResult:
    timestamp: datetime
    device_id: str
    inputs: dict[str, float]
    prediction: GlucosePrediction


@dataclass
class ReadingPage:
    data: list[Record]
    total: int
    limit: int
    offset: int
    filters: dict[str, Any] = field(default_factory=dict)

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


@dataclass
class DeleteResult:
    deleted: int
    remaining: int
    device_id: str | None = None


def new_record_id(now: datetime) -> str:
    """Millisecond creation time followed by a random suffix."""
    return f"{int(now.timestamp() * 1000)}{uuid.uuid4().hex[:9]}"


def _parse_filter_date(value: str | None, field_name: str) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise InputValidationError(
            f"{field_name} must be an ISO 8601 date or datetime", fields=[field_name]
        ) from e
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _newest_first(records: list[Record]) -> list[Record]:
    ordered = sorted(
        enumerate(records), key=lambda pair: (parse_received_at(pair[1]), pair[0]), reverse=True
    )
    return [record for _, record in ordered]


def _has_core_vitals(record: Record) -> bool:
    return all(record.get(key) is not None for key in ("heartRate", "spo2", "temperature"))


class HealthDataService:
    """
    Main service behind every endpoint.

    The store, random source and clock are injected; nothing here is a
    process-wide singleton.
    """

    def __init__(
        self,
        store: HistoryStore,
        rng: RandomSource,
        clock: Clock,
        walker: BoundedRandomWalk | None = None,
        policy: TimeOfDayPolicy | None = None,
        interpreter: Interpreter | None = None,
        scorer: HealthScorer | None = None,
    ) -> None:
        self.store = store
        self.rng = rng
        self.clock = clock
        walker = walker or BoundedRandomWalk()
        policy = policy or TimeOfDayPolicy()
        lookup = DeviceStateLookup()
        self.vitals = VitalsSynthesizer(walker, policy, lookup)
        self.glucose = GlucoseSynthesizer(walker, policy, lookup)
        self.interpreter = interpreter or Interpreter()
        self.scorer = scorer or HealthScorer()
        self.started_at = clock.now()
        self._lock = threading.Lock()
        self.logger = logger.bind(component="health_data_service")

    @classmethod
    def from_config(cls, config: AppConfig, store: HistoryStore) -> "HealthDataService":
        return cls(
            store=store,
            rng=SeededRandomSource(config.simulation.random_seed),
            clock=SystemClock(config.simulation.timezone),
            walker=BoundedRandomWalk(reflect_at_bounds=config.simulation.reflect_at_bounds),
        )

    # ---- write side ----

    def ingest(self, raw: RawSensorReading) -> IngestResult:
        """Synthesize healthy vitals and glucose for ``raw`` and append the reading."""
        with self._lock:
            history = self.store.all()
            hour = self.clock.hour_of_day()
            now = self.clock.now()

            vitals = self.vitals.synthesize(raw.device_id, raw, history, hour, self.rng)
            glucose = self.glucose.synthesize(
                raw.device_id,
                vitals.heart_rate,
                vitals.heart_rate_avg,
                vitals.spo2,
                vitals.temperature,
                history,
                hour,
                self.rng,
            )

            reading = Reading.model_validate(
                {
                    **raw.model_dump(by_alias=True),
                    **vitals.model_dump(by_alias=True),
                    "id": new_record_id(now),
                    "receivedAt": now,
                    "lastGlucose": glucose,
                }
            )
            violations = reading.envelope_violations()
            if violations:
                raise InternalError(
                    f"synthesized reading outside plausibility envelope: {', '.join(violations)}"
                )

            self.store.append(reading.to_record())
            total = len(self.store)

        self.logger.info(
            "reading_ingested",
            device_id=raw.device_id,
            record_id=reading.id,
            heart_rate=reading.heart_rate,
            original_heart_rate=raw.heart_rate,
            spo2=reading.spo2,
            temperature=reading.temperature,
            glucose=glucose,
            total_records=total,
        )
        return IngestResult(reading=reading, total_records=total)

    def delete_readings(self, device_id: str | None = None) -> DeleteResult:
        with self._lock:
            if device_id:
                deleted = self.store.remove_device(device_id)
            else:
                deleted = self.store.clear()
            self.store.save()
            remaining = len(self.store)

        self.logger.info(
            "readings_deleted", device_id=device_id, deleted=deleted, remaining=remaining
        )
        return DeleteResult(deleted=deleted, remaining=remaining, device_id=device_id)

    def flush(self) -> bool:
        with self._lock:
            return self.store.save()

    # ---- glucose ----

    def predict_glucose(self, request: GlucosePredictionRequest) -> GlucosePredictionResult:
        """
        Ad-hoc glucose estimate.

        Without an explicit mode, a request naming a device walks from that
        device's history; an anonymous request uses the single-shot policy.
        """
        device_id = request.device_id or "unknown"
        mode = request.mode or (
            GlucoseMode.HISTORY_WALK if request.device_id else GlucoseMode.SINGLE_SHOT
        )
        heart_rate_avg = (
            request.heart_rate_avg if request.heart_rate_avg is not None else request.heart_rate
        )

        with self._lock:
            hour = self.clock.hour_of_day()
            if mode == GlucoseMode.HISTORY_WALK:
                value = self.glucose.synthesize(
                    device_id,
                    request.heart_rate,
                    heart_rate_avg,
                    request.spo2,
                    request.temperature,
                    self.store.all(),
                    hour,
                    self.rng,
                )
            else:
                value = self.glucose.single_shot(
                    request.heart_rate,
                    heart_rate_avg,
                    request.spo2,
                    request.temperature,
                    hour,
                    self.rng,
                )

        interpretation = self.interpreter.glucose(value)
        prediction = GlucosePrediction(
            glucose_level=value,
            category=interpretation.category,
            status=interpretation.status,
            message=interpretation.message,
            mode=mode,
        )
        self.logger.info(
            "glucose_predicted",
            device_id=device_id,
            mode=mode.value,
            glucose=value,
            category=interpretation.category,
        )
        return GlucosePredictionResult(
            timestamp=self.clock.now(),
            device_id=device_id,
            inputs={
                "heartRate": request.heart_rate,
                "heartRateAvg": heart_rate_avg,
                "spo2": request.spo2,
                "temperature": request.temperature,
            },
            prediction=prediction,
        )

    # ---- read side ----

    def health_view(
        self, device_id: str, include_history: bool = False, history_limit: int = 10
    ) -> Result[HealthView, NotFoundError]:
        """Interpreted view of the device's latest complete reading."""
        history = self.store.all()
        latest_record = latest_for_device(
            device_id, (r for r in history if _has_core_vitals(r))
        )
        if latest_record is None:
            return Result.err(
                NotFoundError(
                    f"No valid sensor readings found for device {device_id}", device_id=device_id
                )
            )

        try:
            reading = Reading.model_validate(latest_record)
        except ValidationError as e:
            raise InternalError(
                f"stored record {latest_record.get('id')!r} for {device_id} is corrupt"
            ) from e

        glucose_value = reading.last_glucose
        if glucose_value is None:
            with self._lock:
                glucose_value = self.glucose.synthesize(
                    device_id,
                    reading.heart_rate,
                    reading.heart_rate_avg,
                    reading.spo2,
                    reading.temperature,
                    history,
                    self.clock.hour_of_day(),
                    self.rng,
                )

        vitals = self.interpreter.vitals(reading.heart_rate, reading.spo2, reading.temperature)
        glucose = self.interpreter.glucose(glucose_value)
        score = self.scorer.score(vitals, glucose)
        now = self.clock.now()

        view = HealthView(
            timestamp=now,
            device_id=device_id,
            simulated_healthy=reading.simulated_healthy,
            sensor_data=SensorSnapshot(
                timestamp=reading.received_at,
                raw=RawChannels(
                    red=reading.red, ir=reading.ir, finger_detected=reading.finger_detected
                ),
            ),
            vitals=VitalsReport(
                heart_rate=VitalReport(
                    value=reading.heart_rate,
                    average=reading.heart_rate_avg,
                    unit="BPM",
                    **vitals["heartRate"].model_dump(),
                ),
                spo2=VitalReport(value=reading.spo2, unit="%", **vitals["spo2"].model_dump()),
                temperature=VitalReport(
                    value=reading.temperature,
                    unit="°C",
                    fahrenheit=celsius_to_fahrenheit(reading.temperature),
                    **vitals["temperature"].model_dump(),
                ),
            ),
            glucose=GlucoseReport(value=glucose_value, **glucose.model_dump()),
            health_score=score,
            quality_indicators=self._quality(reading, now),
            history=self._history(device_id, history, history_limit) if include_history else None,
            original_values=reading.original_values,
        )

        self.logger.info(
            "health_view_built",
            device_id=device_id,
            score=score.score,
            status=score.status,
            glucose=glucose_value,
        )
        return Result.ok(view)

    def list_readings(
        self,
        device_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        valid_only: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> ReadingPage:
        if limit < 0 or offset < 0:
            fields = [name for name, v in (("limit", limit), ("offset", offset)) if v < 0]
            raise InputValidationError("limit and offset must not be negative", fields=fields)

        start = _parse_filter_date(start_date, "startDate")
        end = _parse_filter_date(end_date, "endDate")
        if start and end and start > end:
            raise InputValidationError(
                "startDate must not be after endDate", fields=["startDate", "endDate"]
            )

        records = self.store.all()
        if device_id:
            records = [r for r in records if r.get("deviceId") == device_id]
        if start:
            records = [r for r in records if parse_received_at(r) >= start]
        if end:
            records = [r for r in records if parse_received_at(r) <= end]
        if valid_only:
            records = [
                r
                for r in records
                if r.get("heartRateValid") and r.get("spo2Valid") and r.get("fingerDetected")
            ]

        ordered = _newest_first(records)
        return ReadingPage(
            data=ordered[offset : offset + limit],
            total=len(ordered),
            limit=limit,
            offset=offset,
            filters={
                "deviceId": device_id,
                "startDate": start_date,
                "endDate": end_date,
                "validOnly": valid_only,
            },
        )

    def device_readings(self, device_id: str, limit: int = 50) -> list[Record]:
        if limit < 0:
            raise InputValidationError("limit must not be negative", fields=["limit"])
        records = [r for r in self.store.all() if r.get("deviceId") == device_id]
        return _newest_first(records)[:limit]

    def export_csv(self, device_id: str | None = None) -> Result[str, NotFoundError]:
        records = self.store.all()
        if device_id:
            records = [r for r in records if r.get("deviceId") == device_id]
        if not records:
            return Result.err(NotFoundError("No data to export", device_id=device_id))
        return Result.ok(records_to_csv(records))

    def status(self) -> dict[str, Any]:
        now = self.clock.now()
        return {
            "totalRecords": len(self.store),
            "uptime": round((now - self.started_at).total_seconds(), 3),
            "timestamp": now,
        }

    # ---- helpers ----

    def _quality(self, reading: Reading, now: datetime) -> QualityIndicators:
        strong = reading.red > SIGNAL_STRENGTH_THRESHOLD and reading.ir > SIGNAL_STRENGTH_THRESHOLD
        received_at = reading.received_at
        if received_at.tzinfo is None:
            received_at = received_at.replace(tzinfo=UTC)
        age_seconds = round((now - received_at).total_seconds())
        return QualityIndicators(
            sensor_contact="Good" if reading.finger_detected else "Poor",
            signal_quality="Good" if strong else "Poor",
            data_freshness=f"{age_seconds} seconds ago",
        )

    def _history(self, device_id: str, history: list[Record], limit: int) -> HistorySection:
        records = _newest_first([r for r in history if r.get("deviceId") == device_id])[:limit]
        entries = [
            HistoryEntry(
                timestamp=r.get("receivedAt"),
                heart_rate=r.get("heartRate"),
                spo2=r.get("spo2"),
                temperature=r.get("temperature"),
                finger_detected=r.get("fingerDetected"),
                simulated_healthy=r.get("simulatedHealthy"),
            )
            for r in records
        ]
        return HistorySection(count=len(entries), data=entries)
