"""Daily reminder digest handed to the notification scheduler.

Only the content and the next fire time are worked out here; delivering the
notification is the scheduler's business.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from .config import REMINDER_HOUR
from .dates import to_display_string
from .models import Record
from .views import is_upcoming

logger = logging.getLogger(__name__)

REMINDER_TITLE = "You have upcoming Events!"


@dataclass(frozen=True)
class ReminderDigest:
    title: str
    message: str
    fire_at: datetime
    records: tuple[Record, ...]


def upcoming_for_reminder(records: Iterable[Record], today: datetime | None = None) -> list[Record]:
    return [r for r in records if not r.completed and is_upcoming(r.date, today)]


def reminder_message(records: Iterable[Record]) -> str:
    return "\n".join(f"{r.item} due on {to_display_string(r.date)}" for r in records)


def next_reminder_at(now: datetime | None = None, hour: int = REMINDER_HOUR) -> datetime:
    """Today at ``hour``:00, or tomorrow when that moment has already passed."""
    now = now or datetime.now()
    fire_at = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if fire_at <= now:
        fire_at += timedelta(days=1)
    return fire_at


def build_digest(records: Iterable[Record], now: datetime | None = None) -> ReminderDigest | None:
    """None means nothing is due soon and any pending reminder should be cancelled."""
    now = now or datetime.now()
    due = upcoming_for_reminder(records, now)
    if not due:
        logger.info("No upcoming records, no reminder scheduled")
        return None
    digest = ReminderDigest(
        title=REMINDER_TITLE,
        message=reminder_message(due),
        fire_at=next_reminder_at(now),
        records=tuple(due),
    )
    logger.info("Reminder for %d records at %s", len(due), digest.fire_at.isoformat())
    return digest
