"""CSV rendering of stored records."""

import csv
import io
import json
from collections.abc import Iterable
from typing import Any

from vitalsim.services.history import Record


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict | list):
        return json.dumps(value, separators=(",", ":"))
    return value


def records_to_csv(records: Iterable[Record]) -> str:
    """
    One row per record. Columns are the union of record keys in first-seen
    order, so older records missing newer fields still line up.
    """
    rows = list(records)
    columns: list[str] = []
    for row in rows:
        columns.extend(key for key in row if key not in columns)

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, restval="", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({key: _cell(value) for key, value in row.items()})
    return buffer.getvalue()
