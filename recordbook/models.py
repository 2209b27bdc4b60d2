from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Record:
    """One dated task row.

    ``date`` is always the canonical ISO string (``2025-01-05T00:00:00``) or
    ``""`` when the row had no usable date. ``sequence_number`` mirrors the
    display position and is renumbered after deletes.
    """
    sequence_number: int
    item: str = ""
    description: str = ""
    date: str = ""
    completed: bool = False


@dataclass
class RecordForm:
    """Editable fields coming back from an add/edit form.

    ``date`` may be in any representation the date codec accepts; it is
    normalized before it lands in a Record. ``sequence_number`` is set when
    editing an existing record.
    """
    item: str = ""
    description: str = ""
    date: Any = None
    sequence_number: int | None = None
    completed: bool | None = None

    @property
    def is_edit(self) -> bool:
        return self.sequence_number is not None
