"""Date codec.

Three representations meet here:

* spreadsheet serials (days since 1899-12-30, with the phantom 1900-02-29
  of the spreadsheet format folded in for serials after day 60),
* free text (``"January 5, 2025"``, ``"2025-01-05"``, ...),
* the canonical ISO string stored on every Record
  (``"2025-01-05T00:00:00"``).

``normalize`` is the only way dates enter a Record.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

import pandas as pd

from .config import SERIAL_EPOCH, SERIAL_LEAP_BUG_BOUNDARY
from .errors import Invalid, InvalidDate, Ok

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


class DateKind(Enum):
    SERIAL = "serial"
    TEXT = "text"
    CANONICAL = "canonical"
    ABSENT = "absent"


@dataclass(frozen=True)
class DateInput:
    kind: DateKind
    value: Any = None


def classify_date(value: Any) -> DateInput:
    """Tag a raw cell/form value with the representation it arrived in."""
    if value is None:
        return DateInput(DateKind.ABSENT)
    if isinstance(value, str):
        text = value.strip()
        return DateInput(DateKind.TEXT, text) if text else DateInput(DateKind.ABSENT)
    if pd.api.types.is_bool(value):
        return DateInput(DateKind.ABSENT)
    if isinstance(value, (datetime, date)) or pd.api.types.is_number(value):
        # NaN / NaT come out of pandas for empty cells
        if pd.isna(value):
            return DateInput(DateKind.ABSENT)
        if isinstance(value, (datetime, date)):
            return DateInput(DateKind.CANONICAL, value)
        return DateInput(DateKind.SERIAL, value)
    return DateInput(DateKind.ABSENT)


# ---------- Serial dates ----------

def decode_serial(serial: float) -> datetime:
    try:
        days = float(serial)
    except (TypeError, ValueError) as exc:
        raise InvalidDate(f"not a serial date: {serial!r}") from exc
    if math.isnan(days) or math.isinf(days):
        raise InvalidDate(f"not a serial date: {serial!r}")
    if days > SERIAL_LEAP_BUG_BOUNDARY:
        days -= 1
    try:
        return SERIAL_EPOCH + timedelta(days=days)
    except OverflowError as exc:
        raise InvalidDate(f"serial date out of range: {serial!r}") from exc


def encode_serial(value: Any) -> int:
    """Inverse of ``decode_serial``; accepts a canonical string or a date."""
    moment = _decode(classify_date(value))
    days = (moment - SERIAL_EPOCH) / ONE_DAY
    if days >= SERIAL_LEAP_BUG_BOUNDARY:
        days += 1
    return math.floor(days + 0.5)


# ---------- Text / canonical ----------

def decode_text(text: str) -> datetime:
    try:
        stamp = pd.to_datetime(text.strip())
    except (ValueError, TypeError, OverflowError, AttributeError) as exc:
        raise InvalidDate(f"unparseable date text: {text!r}") from exc
    if pd.isna(stamp):
        raise InvalidDate(f"unparseable date text: {text!r}")
    return _from_datetime_like(stamp)


def try_decode(value: Any) -> Ok[datetime] | Invalid:
    """Decode any accepted representation without raising."""
    try:
        return Ok(_decode(classify_date(value)))
    except InvalidDate as exc:
        return Invalid(str(exc))


def parse_canonical(value: Any) -> datetime | None:
    """Datetime for a stored date, or None when it is empty or unreadable."""
    result = try_decode(value)
    return result.value if result.ok else None


def to_canonical(moment: datetime) -> str:
    return moment.replace(tzinfo=None).isoformat(timespec="seconds")


def to_display_string(value: Any) -> str:
    """'January 5, 2025' for any accepted date; '' if there is none."""
    moment = parse_canonical(value)
    if moment is None:
        return ""
    return f"{moment:%B} {moment.day}, {moment.year}"


def normalize(value: Any) -> str:
    result = try_decode(value)
    if not result.ok:
        if classify_date(value).kind is not DateKind.ABSENT:
            logger.debug("Dropping undecodable date %r: %s", value, result.reason)
        return ""
    return to_canonical(result.value)


# ---------- Helpers ----------

def _from_datetime_like(value: datetime | date) -> datetime:
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        # keep wall-clock time, drop the zone
        return value.replace(tzinfo=None)
    return datetime.combine(value, time())


def _decode_text_or_iso(text: str) -> datetime:
    try:
        return _from_datetime_like(datetime.fromisoformat(text))
    except ValueError:
        return decode_text(text)


_DECODERS = {
    DateKind.SERIAL: decode_serial,
    DateKind.TEXT: _decode_text_or_iso,
    DateKind.CANONICAL: _from_datetime_like,
}


def _decode(parsed: DateInput) -> datetime:
    decoder = _DECODERS.get(parsed.kind)
    if decoder is None:
        raise InvalidDate("no date given")
    return decoder(parsed.value)
