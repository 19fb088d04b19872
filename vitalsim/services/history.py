"""
History store protocol and the in-process implementation.

Records are plain JSON mappings in insertion order. The store owns them; the
synthesis components only ever see a snapshot from ``all()``.
"""

from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)

Record = dict[str, Any]


class HistoryStore(Protocol):
    """Append-only record log with bulk deletes and load/save hooks."""

    def append(self, record: Record) -> None: ...

    def all(self) -> list[Record]: ...

    def remove_device(self, device_id: str) -> int: ...

    def clear(self) -> int: ...

    def load(self) -> int: ...

    def save(self) -> bool: ...

    def __len__(self) -> int: ...


class InMemoryHistoryStore:
    """
    Bounded in-process record log.

    Keeps at most ``max_records``; the oldest records are dropped first.
    ``load``/``save`` are no-ops so the store also serves tests and the CLI.
    """

    def __init__(self, max_records: int = 10000, records: list[Record] | None = None) -> None:
        if max_records <= 0:
            raise ValueError("max_records must be positive")
        self.max_records = max_records
        self._records: list[Record] = list(records or [])[-max_records:]
        self.logger = logger.bind(component=type(self).__name__)

    def append(self, record: Record) -> None:
        self._records.append(record)
        overflow = len(self._records) - self.max_records
        if overflow > 0:
            del self._records[:overflow]
            self.logger.debug("history_trimmed", dropped=overflow)

    def all(self) -> list[Record]:
        return list(self._records)

    def remove_device(self, device_id: str) -> int:
        before = len(self._records)
        self._records = [r for r in self._records if r.get("deviceId") != device_id]
        return before - len(self._records)

    def clear(self) -> int:
        removed = len(self._records)
        self._records = []
        return removed

    def load(self) -> int:
        return len(self._records)

    def save(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._records)
