"""Error taxonomy and explicit result values.

Decoding problems raise ``InvalidDate`` inside the date codec and are turned
into empty dates at its boundary. Store operations never raise for I/O; they
return ``Ok`` or ``IoError`` so the caller has to look at the outcome.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class RecordBookError(Exception):
    pass


class InvalidDate(RecordBookError, ValueError):
    """A date value could not be decoded from any known representation."""


class ReadFailure(RecordBookError):
    pass


class WriteFailure(RecordBookError):
    pass


class PermissionDenied(RecordBookError):
    pass


# ---------- Result values ----------

@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None  # type: ignore[assignment]

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Invalid:
    reason: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise InvalidDate(self.reason)


@dataclass(frozen=True)
class IoError:
    reason: str
    path: Path | None = None

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        where = f" ({self.path})" if self.path is not None else ""
        raise WriteFailure(f"{self.reason}{where}")
