"""Whole-file persistence of the record collection in an .xlsx workbook.

Reads never raise: a missing or broken workbook comes back as an empty
collection with ``ReadStatus.FAILED`` so the caller can tell it apart from a
workbook that simply has no rows. Writes return ``Ok`` or ``IoError``.

There is no locking. Every write replaces the whole file and the last writer
wins; callers await one operation before starting the next.
"""
import asyncio
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Iterable

import pandas as pd
from openpyxl.utils.datetime import to_excel

from .config import COL_DATE, COLUMNS, DATE_CELL_FORMAT, SHEET_NAME, resolve_path
from .dates import normalize
from .errors import IoError, Ok, PermissionDenied, ReadFailure
from .models import Record
from .permissions import PermissionGate
from .rows import from_row, to_row

logger = logging.getLogger(__name__)


class ReadStatus(Enum):
    OK = "ok"
    FAILED = "failed"
    PERMISSION_DENIED = "permission_denied"


@dataclass(frozen=True)
class ReadResult:
    records: list[Record] = field(default_factory=list)
    status: ReadStatus = ReadStatus.OK
    reason: str = ""
    path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.OK

    def raise_for_status(self) -> None:
        if self.status is ReadStatus.PERMISSION_DENIED:
            raise PermissionDenied(self.reason)
        if self.status is ReadStatus.FAILED:
            raise ReadFailure(f"{self.reason} ({self.path})")


# ---------- Read ----------

def _frame_rows(frame: pd.DataFrame) -> list[dict]:
    frame = frame.rename(columns=lambda c: str(c).strip())
    frame = frame.dropna(how="all")
    return frame.to_dict("records")


def read_records(path: str | Path) -> ReadResult:
    """Read every row of the first sheet into Records."""
    path = Path(path)
    if not path.exists():
        logger.error("Workbook not found: %s", path)
        return ReadResult(status=ReadStatus.FAILED, reason="file not found", path=path)
    try:
        # dtype=object keeps each cell as openpyxl typed it; text like "007" stays text
        frame = pd.read_excel(
            path,
            sheet_name=0,
            engine="openpyxl",
            dtype=object,
            keep_default_na=False,
            na_values=[""],
        )
    except Exception as exc:
        logger.error("Could not read workbook %s: %s", path, exc)
        return ReadResult(status=ReadStatus.FAILED, reason=str(exc) or type(exc).__name__, path=path)

    records = [from_row(row, index) for index, row in enumerate(_frame_rows(frame))]
    logger.info("Loaded %d records from %s", len(records), path)
    return ReadResult(records=records, path=path)


def load_records(gate: PermissionGate, path: str | Path) -> ReadResult:
    """Permission-checked read. A refused gate means the file is never opened."""
    path = Path(path)
    if not gate.check_permission():
        logger.warning("Storage permission denied, not reading %s", path)
        return ReadResult(
            status=ReadStatus.PERMISSION_DENIED,
            reason="Storage permission denied",
            path=path,
        )
    return read_records(path)


# ---------- Write ----------

def _format_date_cells(sheet) -> None:
    """Mark every date in the date column as a real date cell."""
    column = COLUMNS.index(COL_DATE) + 1
    for (cell,) in sheet.iter_rows(min_row=2, min_col=column, max_col=column):
        if not isinstance(cell.value, (datetime, date)):
            continue
        if 0 <= to_excel(cell.value) < 1:
            # serials below 1 read back as a bare time of day
            logger.debug("Storing %s as text, serial would read back as a time", cell.value)
            cell.value = normalize(cell.value)
            continue
        cell.data_type = "d"
        cell.number_format = DATE_CELL_FORMAT


def write_records(path: str | Path, records: Iterable[Record]) -> Ok | IoError:
    """Replace the workbook with ``records``.

    The sheet is saved to a sibling file first and moved over the target, so a
    failed save leaves the previous workbook intact.
    """
    path = Path(path)
    frame = pd.DataFrame([to_row(r) for r in records], columns=COLUMNS)
    staging: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=f".{path.stem}-", suffix=path.suffix or ".xlsx", dir=path.parent)
        os.close(fd)
        staging = Path(name)
        if path.exists():
            shutil.copymode(path, staging)
        with pd.ExcelWriter(staging, engine="openpyxl") as writer:
            frame.to_excel(writer, index=False, sheet_name=SHEET_NAME)
            _format_date_cells(writer.sheets[SHEET_NAME])
        os.replace(staging, path)
        staging = None
    except OSError as exc:
        logger.error("Could not write workbook %s: %s", path, exc)
        return IoError(str(exc) or type(exc).__name__, path)
    finally:
        if staging is not None:
            staging.unlink(missing_ok=True)
    logger.info("Saved %d records to %s", len(frame), path)
    return Ok()


# ---------- Async facade ----------

class SpreadsheetStore:
    """Fixed workbook location with awaitable read/write.

    File work runs in a worker thread. A write that has started always runs to
    completion or failure.
    """

    def __init__(self, filename: str | None = None, directory: str | Path | None = None):
        self.path: Path = resolve_path(filename, directory)

    async def read_all(self) -> ReadResult:
        return await asyncio.to_thread(read_records, self.path)

    async def load(self, gate: PermissionGate) -> ReadResult:
        return await asyncio.to_thread(load_records, gate, self.path)

    async def write_all(self, records: Iterable[Record]) -> Ok | IoError:
        return await asyncio.to_thread(write_records, self.path, list(records))
