from datetime import datetime
from pathlib import Path

DEFAULT_FILENAME = "data.xlsx"
SHEET_NAME = "records"

# ---------- Workbook layout ----------

COL_SEQUENCE = "sl_no"
COL_ITEM = "item"
COL_DATE = "date"
COL_DESCRIPTION = "description"
COL_COMPLETED = "completed"
COLUMNS = [COL_SEQUENCE, COL_ITEM, COL_DATE, COL_DESCRIPTION, COL_COMPLETED]

DATE_CELL_FORMAT = "dd/mm/yyyy"

# ---------- Dates ----------

SERIAL_EPOCH = datetime(1899, 12, 30)
# Serials above this day carry the phantom 1900-02-29 of the spreadsheet format.
SERIAL_LEAP_BUG_BOUNDARY = 60

# ---------- Views / reminders ----------

UPCOMING_WINDOW_DAYS = 3
STALE_AFTER_MONTHS = 1
REMINDER_HOUR = 9


def default_storage_dir() -> Path:
    """Shared storage folder the workbook lives in (the user's Downloads)."""
    return Path.home() / "Downloads"


def resolve_path(filename: str | None = None, directory: str | Path | None = None) -> Path:
    base = Path(directory) if directory is not None else default_storage_dir()
    return base / (filename or DEFAULT_FILENAME)
