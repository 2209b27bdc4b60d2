"""RecordBook: dated task records kept in a spreadsheet workbook."""
from .dates import decode_serial, decode_text, encode_serial, normalize, to_display_string
from .errors import InvalidDate, IoError, Ok, PermissionDenied, ReadFailure, WriteFailure
from .models import Record, RecordForm
from .rows import from_row, to_row
from .store import ReadResult, ReadStatus, SpreadsheetStore, load_records, read_records, write_records
from .transitions import apply_add, apply_delete, apply_edit, apply_form, toggle_complete
from .views import ViewOptions, is_stale, is_upcoming, project, sort_records, visible_records

__version__ = "0.1.0"
