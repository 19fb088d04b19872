"""
JSON-file persistence for the history store.

The whole log is one JSON array. Writes are best effort: every
``flush_every`` appends and on shutdown. Records appended since the last
flush are lost on a crash.
"""

import json
import os
import tempfile
from pathlib import Path

import structlog

from vitalsim.services.history import InMemoryHistoryStore, Record
from vitalsim.services.result import Result

logger = structlog.get_logger(__name__)


def read_records(path: Path) -> Result[list[Record], Exception]:
    """Parse the store file. A missing file is an empty history, not an error."""
    if not path.exists():
        return Result.ok([])
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        return Result.err(e)

    if not isinstance(data, list):
        return Result.err(ValueError(f"{path} does not contain a JSON array"))

    records = [item for item in data if isinstance(item, dict)]
    if len(records) != len(data):
        logger.warning("history_entries_skipped", path=str(path), skipped=len(data) - len(records))
    return Result.ok(records)


class JsonFileHistoryStore(InMemoryHistoryStore):
    """In-memory log mirrored to a JSON file."""

    def __init__(self, path: str | Path, flush_every: int = 10, max_records: int = 10000) -> None:
        super().__init__(max_records=max_records)
        if flush_every <= 0:
            raise ValueError("flush_every must be positive")
        self.path = Path(path)
        self.flush_every = flush_every
        self._unflushed = 0
        self.logger = logger.bind(component="json_history_store", path=str(self.path))

    def load(self) -> int:
        result = read_records(self.path)
        if result.is_err():
            self.logger.error("history_load_failed", error=str(result.unwrap_err()))
            self._records = []
            return 0

        self._records = result.unwrap()[-self.max_records :]
        self._unflushed = 0
        self.logger.info("history_loaded", records=len(self._records))
        return len(self._records)

    def append(self, record: Record) -> None:
        super().append(record)
        self._unflushed += 1
        if self._unflushed >= self.flush_every:
            self.save()

    def save(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(self._records, handle, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            self.logger.exception("history_save_failed", error=str(e))
            return False

        self._unflushed = 0
        self.logger.debug("history_saved", records=len(self._records))
        return True
