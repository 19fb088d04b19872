"""
Last-known-vitals lookup over a snapshot of the history store.

Stored records are plain JSON mappings and may be partial (older versions,
hand edits). Each field falls back to its own default rather than failing the
whole lookup.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from vitalsim.domain.models import (
    DEFAULT_GLUCOSE,
    DEFAULT_HEART_RATE,
    DEFAULT_SPO2,
    DEFAULT_TEMPERATURE,
    LastValues,
)

Record = Mapping[str, Any]

_OLDEST = datetime.min.replace(tzinfo=UTC)


def parse_received_at(record: Record) -> datetime:
    """``receivedAt`` as an aware datetime; unparsable values sort as oldest."""
    raw = record.get("receivedAt")
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, str):
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return _OLDEST
    else:
        return _OLDEST
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def latest_for_device(device_id: str, history: Iterable[Record]) -> Record | None:
    """
    Record with the greatest ``receivedAt`` among this device's records.
    On equal timestamps the later-appended record wins.
    """
    candidates = [record for record in history if record.get("deviceId") == device_id]
    if not candidates:
        return None
    _, latest = max(
        enumerate(candidates), key=lambda pair: (parse_received_at(pair[1]), pair[0])
    )
    return latest


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _number_or(value: Any, default: float) -> float:
    number = _number(value)
    return default if number is None else number


class DeviceStateLookup:
    """Finds the values the next walk step starts from."""

    def last_values(self, device_id: str, history: Iterable[Record]) -> LastValues:
        latest = latest_for_device(device_id, history)
        if latest is None:
            return LastValues()

        return LastValues(
            heart_rate=_number_or(latest.get("heartRate"), DEFAULT_HEART_RATE),
            spo2=_number_or(latest.get("spo2"), DEFAULT_SPO2),
            temperature=_number_or(latest.get("temperature"), DEFAULT_TEMPERATURE),
            glucose=_number_or(latest.get("lastGlucose"), DEFAULT_GLUCOSE),
            red=_number(latest.get("red")),
            ir=_number(latest.get("ir")),
        )
