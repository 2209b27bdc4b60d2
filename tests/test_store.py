from __future__ import annotations

import os
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest import mock

from openpyxl import Workbook, load_workbook

from recordbook.config import resolve_path
from recordbook.errors import IoError, Ok, PermissionDenied, ReadFailure, WriteFailure
from recordbook.models import Record
from recordbook.permissions import DirectoryPermissionGate, StaticPermissionGate
from recordbook.store import (
    ReadStatus,
    SpreadsheetStore,
    load_records,
    read_records,
    write_records,
)

RECORDS = [
    Record(1, "Rent", "pay landlord", "2025-01-05T00:00:00", False),
    Record(2, "Dentist", "", "2025-02-10T14:30:00", True),
    Record(3, "Ideas", "no date yet", "", False),
]


class CountingGate(StaticPermissionGate):
    def __init__(self, granted: bool = True):
        super().__init__(granted)
        self.calls = 0

    def check_permission(self) -> bool:
        self.calls += 1
        return super().check_permission()


def _workbook(path: Path, rows: list[list], extra_sheet: bool = False) -> None:
    wb = Workbook()
    ws = wb.active
    ws.title = "first"
    for row in rows:
        ws.append(row)
    if extra_sheet:
        other = wb.create_sheet("second")
        other.append(["sl_no", "item"])
        other.append([99, "should not be read"])
    wb.save(path)


class TestWriteThenRead(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.path = self.dir / "data.xlsx"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_round_trip(self) -> None:
        result = write_records(self.path, RECORDS)
        self.assertIsInstance(result, Ok)
        loaded = read_records(self.path)
        self.assertEqual(loaded.status, ReadStatus.OK)
        self.assertEqual(loaded.records, RECORDS)

    def test_date_cells_are_typed_dates(self) -> None:
        write_records(self.path, RECORDS)
        wb = load_workbook(self.path)
        ws = wb.worksheets[0]
        self.assertEqual([c.value for c in ws[1]], ["sl_no", "item", "date", "description", "completed"])
        first = ws.cell(row=2, column=3)
        self.assertTrue(first.is_date)
        self.assertEqual(first.number_format, "dd/mm/yyyy")
        self.assertEqual(first.value, datetime(2025, 1, 5))
        self.assertTrue(ws.cell(row=3, column=3).is_date)
        self.assertEqual(len(wb.sheetnames), 1)

    def test_empty_collection_reads_back_empty_without_error(self) -> None:
        write_records(self.path, [])
        loaded = read_records(self.path)
        self.assertTrue(loaded.ok)
        self.assertEqual(loaded.records, [])

    def test_overwrite_replaces_whole_file(self) -> None:
        write_records(self.path, RECORDS)
        write_records(self.path, RECORDS[:1])
        self.assertEqual(read_records(self.path).records, RECORDS[:1])

    def test_numeric_looking_text_is_kept_verbatim(self) -> None:
        records = [
            Record(1, "007", "1e5", "2025-01-01T00:00:00"),
            Record(2, "True", "12.50", ""),
            Record(3, "2024", "-0", "2025-03-01T00:00:00"),
        ]
        write_records(self.path, records)
        self.assertEqual(read_records(self.path).records, records)

    def test_single_digit_item_column_keeps_leading_zeros(self) -> None:
        records = [Record(1, "007", "")]
        write_records(self.path, records)
        self.assertEqual(read_records(self.path).records, records)

    def test_dates_around_spreadsheet_day_zero(self) -> None:
        days = ["1850-03-04", "1899-12-25", "1899-12-30", "1899-12-31", "1900-01-01", "1900-03-01"]
        records = [Record(i, "d", "", f"{day}T00:00:00") for i, day in enumerate(days, start=1)]
        write_records(self.path, records)
        self.assertEqual([r.date for r in read_records(self.path).records], [r.date for r in records])

    def test_failed_save_keeps_previous_workbook(self) -> None:
        write_records(self.path, RECORDS)
        with mock.patch("recordbook.store._format_date_cells", side_effect=OSError("No space left on device")):
            result = write_records(self.path, RECORDS[:1])
        self.assertIsInstance(result, IoError)
        self.assertEqual(read_records(self.path).records, RECORDS)
        self.assertEqual(os.listdir(self.dir), ["data.xlsx"])


class TestRead(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.path = self.dir / "data.xlsx"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_is_a_reported_failure(self) -> None:
        result = read_records(self.path)
        self.assertEqual(result.status, ReadStatus.FAILED)
        self.assertEqual(result.records, [])
        with self.assertRaises(ReadFailure):
            result.raise_for_status()

    def test_corrupt_file_is_a_reported_failure(self) -> None:
        self.path.write_text("definitely not a workbook", encoding="utf-8")
        result = read_records(self.path)
        self.assertEqual(result.status, ReadStatus.FAILED)
        self.assertEqual(result.records, [])
        self.assertTrue(result.reason)

    def test_row_without_date_column(self) -> None:
        _workbook(self.path, [["sl_no", "item", "description"], [1, "Rent", "monthly"]])
        result = read_records(self.path)
        self.assertEqual(result.records, [Record(1, "Rent", "monthly", "", False)])

    def test_mixed_date_encodings(self) -> None:
        _workbook(self.path, [
            ["sl_no", "item", "date", "description"],
            [1, "serial", 44197, ""],
            [2, "text", "January 5, 2025", ""],
            [3, "typed", datetime(2025, 2, 1), ""],
            [4, "junk", "whenever", ""],
        ])
        dates = [r.date for r in read_records(self.path).records]
        self.assertEqual(dates, ["2020-12-31T00:00:00", "2025-01-05T00:00:00", "2025-02-01T00:00:00", ""])

    def test_missing_sequence_uses_position(self) -> None:
        _workbook(self.path, [["item", "date"], ["a", None], ["b", None]])
        self.assertEqual([r.sequence_number for r in read_records(self.path).records], [1, 2])

    def test_only_first_sheet_is_read(self) -> None:
        _workbook(self.path, [["sl_no", "item"], [1, "kept"]], extra_sheet=True)
        self.assertEqual([r.item for r in read_records(self.path).records], ["kept"])

    def test_text_that_looks_like_missing_value_is_kept(self) -> None:
        _workbook(self.path, [["sl_no", "item"], [1, "NA"]])
        self.assertEqual(read_records(self.path).records[0].item, "NA")


class TestWriteFailure(unittest.TestCase):
    def test_unwritable_location_returns_io_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")
            result = write_records(blocker / "data.xlsx", RECORDS)
            self.assertIsInstance(result, IoError)
            self.assertFalse(result.ok)
            with self.assertRaises(WriteFailure):
                result.unwrap()


class TestPermissionGate(unittest.TestCase):
    def test_denied_gate_skips_read(self) -> None:
        gate = CountingGate(False)
        result = load_records(gate, "/nonexistent/data.xlsx")
        self.assertEqual(gate.calls, 1)
        self.assertEqual(result.status, ReadStatus.PERMISSION_DENIED)
        self.assertEqual(result.records, [])
        with self.assertRaises(PermissionDenied):
            result.raise_for_status()

    def test_granted_gate_reads(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "data.xlsx"
            write_records(path, RECORDS)
            result = load_records(DirectoryPermissionGate(tmp), path)
            self.assertEqual(result.records, RECORDS)

    def test_directory_gate_refuses_missing_folder(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertTrue(DirectoryPermissionGate(tmp).check_permission())
            self.assertFalse(DirectoryPermissionGate(Path(tmp) / "absent").check_permission())


class TestAsyncStore(unittest.IsolatedAsyncioTestCase):
    async def test_write_all_then_read_all(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SpreadsheetStore("records.xlsx", tmp)
            self.assertEqual(store.path, Path(tmp) / "records.xlsx")
            self.assertTrue((await store.write_all(RECORDS)).ok)
            result = await store.read_all()
            self.assertEqual(result.records, RECORDS)
            denied = await store.load(StaticPermissionGate(False))
            self.assertEqual(denied.status, ReadStatus.PERMISSION_DENIED)


class TestLocation(unittest.TestCase):
    def test_default_location_is_downloads(self) -> None:
        self.assertEqual(resolve_path(), Path.home() / "Downloads" / "data.xlsx")
        self.assertEqual(resolve_path("x.xlsx", "/tmp/shared"), Path("/tmp/shared/x.xlsx"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
