"""Pure add/edit/delete/complete steps over a record collection.

Each function returns a new list; the caller persists the whole result with
``SpreadsheetStore.write_all``.
"""
from dataclasses import replace
from typing import Iterable

from .dates import normalize
from .models import Record, RecordForm


def renumber(records: Iterable[Record]) -> list[Record]:
    """Sequence numbers become 1..N in the current order."""
    return [
        r if r.sequence_number == position else replace(r, sequence_number=position)
        for position, r in enumerate(records, start=1)
    ]


def apply_add(records: Iterable[Record], form: RecordForm) -> list[Record]:
    current = list(records)
    record = Record(
        sequence_number=len(current) + 1,
        item=form.item or "",
        description=form.description or "",
        date=normalize(form.date),
        completed=bool(form.completed),
    )
    return current + [record]


def _position(records: list[Record], sequence_number: int) -> int:
    for position, record in enumerate(records):
        if record.sequence_number == sequence_number:
            return position
    raise KeyError(f"No record with sequence number {sequence_number}")


def apply_edit(records: Iterable[Record], form: RecordForm) -> list[Record]:
    if not form.is_edit:
        raise ValueError("Edit form has no sequence number")
    current = list(records)
    position = _position(current, form.sequence_number)
    original = current[position]
    current[position] = replace(
        original,
        item=form.item or "",
        description=form.description or "",
        date=normalize(form.date),
        completed=original.completed if form.completed is None else bool(form.completed),
    )
    return current


def apply_form(records: Iterable[Record], form: RecordForm) -> list[Record]:
    return apply_edit(records, form) if form.is_edit else apply_add(records, form)


def apply_delete(records: Iterable[Record], sequence_number: int) -> list[Record]:
    current = list(records)
    del current[_position(current, sequence_number)]
    return renumber(current)


def toggle_complete(records: Iterable[Record], sequence_number: int) -> list[Record]:
    current = list(records)
    position = _position(current, sequence_number)
    current[position] = replace(current[position], completed=not current[position].completed)
    return current
