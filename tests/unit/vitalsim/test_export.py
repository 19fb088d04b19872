"""Tests for CSV rendering of stored records."""

import csv
import io

from vitalsim.services.export import records_to_csv


def test_columns_are_union_in_first_seen_order() -> None:
    records = [
        {"id": "1", "heartRate": 70},
        {"id": "2", "heartRate": 71, "lastGlucose": 88.5},
    ]

    rows = list(csv.reader(io.StringIO(records_to_csv(records))))

    assert rows[0] == ["id", "heartRate", "lastGlucose"]
    assert rows[1] == ["1", "70", ""]
    assert rows[2] == ["2", "71", "88.5"]


def test_cell_encoding() -> None:
    records = [{"ok": True, "bad": False, "none": None, "nested": {"heartRate": 140}}]

    rows = list(csv.reader(io.StringIO(records_to_csv(records))))

    assert rows[1] == ["true", "false", "", '{"heartRate":140}']
