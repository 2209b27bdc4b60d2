"""Row <-> Record mapping for the workbook columns."""
from typing import Any, Mapping

import pandas as pd

from .config import COL_COMPLETED, COL_DATE, COL_DESCRIPTION, COL_ITEM, COL_SEQUENCE
from .dates import normalize, parse_canonical
from .models import Record

TRUTHY = {"true", "yes", "1", "x"}


def _cell(row: Mapping[str, Any], key: str) -> Any:
    value = row.get(key)
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _sequence(value: Any, index: int) -> int:
    if value is None or pd.api.types.is_bool(value):
        return index + 1
    try:
        number = float(value)
    except (TypeError, ValueError):
        return index + 1
    if not number.is_integer() or number < 1:
        return index + 1
    return int(number)


def _flag(value: Any) -> bool:
    if value is None:
        return False
    if pd.api.types.is_bool(value):
        return bool(value)
    if pd.api.types.is_number(value):
        return value == 1
    return str(value).strip().lower() in TRUTHY


def from_row(row: Mapping[str, Any], index: int) -> Record:
    """Build a Record from one sheet row; bad or missing cells fall back to defaults."""
    return Record(
        sequence_number=_sequence(_cell(row, COL_SEQUENCE), index),
        item=_text(_cell(row, COL_ITEM)),
        description=_text(_cell(row, COL_DESCRIPTION)),
        date=normalize(_cell(row, COL_DATE)),
        completed=_flag(_cell(row, COL_COMPLETED)),
    )


def to_row(record: Record) -> dict[str, Any]:
    # a typed datetime lets the writer mark the cell as a date
    return {
        COL_SEQUENCE: record.sequence_number,
        COL_ITEM: record.item,
        COL_DATE: parse_canonical(record.date),
        COL_DESCRIPTION: record.description,
        COL_COMPLETED: record.completed,
    }
