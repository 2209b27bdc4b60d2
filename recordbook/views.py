"""Read-only projections of a record collection for display.

Nothing here mutates its input; every function returns a new list.
"""
import locale
from dataclasses import dataclass, fields
from datetime import datetime, timedelta
from operator import itemgetter
from typing import Any, Iterable

from dateutil.relativedelta import relativedelta

from .config import STALE_AFTER_MONTHS, UPCOMING_WINDOW_DAYS
from .dates import parse_canonical
from .models import Record

ASC = "asc"
DESC = "desc"
SORT_KEYS = tuple(f.name for f in fields(Record))
KEY_ALIASES = {"sl_no": "sequence_number"}

# Rank of each value kind when one column mixes kinds.
_BOOL, _NUMBER, _INSTANT, _TEXT = range(4)


# ---------- Sorting ----------

def _sort_value(record: Record, key: str) -> tuple | None:
    value = getattr(record, key)
    if key == "date":
        moment = parse_canonical(value)
        return None if moment is None else (_INSTANT, moment)
    if value is None:
        return None
    if isinstance(value, bool):
        return (_BOOL, int(value))
    if isinstance(value, (int, float)):
        return (_NUMBER, value)
    text = str(value)
    return (_TEXT, locale.strxfrm(text.casefold()), locale.strxfrm(text))


def sort_records(records: Iterable[Record], key: str, direction: str = ASC) -> list[Record]:
    """Stable sort on one field. Empty values go last in either direction."""
    key = KEY_ALIASES.get(key, key)
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key!r}")
    if direction not in (ASC, DESC):
        raise ValueError(f"Sort direction must be {ASC!r} or {DESC!r}, got {direction!r}")

    keyed, missing = [], []
    for record in records:
        value = _sort_value(record, key)
        if value is None:
            missing.append(record)
        else:
            keyed.append((value, record))
    keyed.sort(key=itemgetter(0), reverse=direction == DESC)
    return [record for _, record in keyed] + missing


# ---------- Date windows ----------

def _midnight(today: Any = None) -> datetime:
    moment = datetime.now() if today is None else parse_canonical(today)
    if moment is None:
        raise ValueError(f"Invalid reference day: {today!r}")
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def is_upcoming(value: Any, today: Any = None) -> bool:
    """Due between today 00:00 and three days later 00:00, both ends included."""
    moment = parse_canonical(value)
    if moment is None:
        return False
    start = _midnight(today)
    return start <= moment <= start + timedelta(days=UPCOMING_WINDOW_DAYS)


def is_stale(value: Any, today: Any = None) -> bool:
    """Due on or before the same day one calendar month ago."""
    moment = parse_canonical(value)
    if moment is None:
        return False
    return moment <= _midnight(today) - relativedelta(months=STALE_AFTER_MONTHS)


def visible_records(
    records: Iterable[Record],
    hide_stale_completed: bool = True,
    upcoming_only: bool = False,
    today: Any = None,
) -> list[Record]:
    # stale completed records are dropped before the upcoming filter runs
    today = _midnight(today)
    shown = list(records)
    if hide_stale_completed:
        shown = [r for r in shown if not (r.completed and is_stale(r.date, today))]
    if upcoming_only:
        shown = [r for r in shown if is_upcoming(r.date, today) and not r.completed]
    return shown


@dataclass(frozen=True)
class ViewOptions:
    sort_key: str = "sequence_number"
    direction: str = ASC
    hide_stale_completed: bool = True
    upcoming_only: bool = False


def project(records: Iterable[Record], options: ViewOptions = ViewOptions(), today: Any = None) -> list[Record]:
    shown = visible_records(
        records,
        hide_stale_completed=options.hide_stale_completed,
        upcoming_only=options.upcoming_only,
        today=today,
    )
    return sort_records(shown, options.sort_key, options.direction)
