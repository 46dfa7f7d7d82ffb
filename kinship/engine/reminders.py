"""Reminder completion and anniversary reminders.

One-time reminders are marked completed. Repeating reminders stay open and
move their due date to the next occurrence.

Usage:
    from kinship.engine.reminders import complete_reminder

    complete_reminder(db, reminder_id)
"""

from datetime import date, datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from kinship.core.logging import get_logger
from kinship.db.database import Database
from kinship.db.models import Reminder, ReminderType, RepeatInterval

logger = get_logger(__name__)

# Step to the next occurrence; month/year steps clamp to month end
REPEAT_STEPS: dict[RepeatInterval, relativedelta] = {
    RepeatInterval.WEEKLY: relativedelta(days=7),
    RepeatInterval.MONTHLY: relativedelta(months=1),
    RepeatInterval.QUARTERLY: relativedelta(months=3),
    RepeatInterval.YEARLY: relativedelta(years=1),
}


def next_due_date(due: date, repeat: RepeatInterval) -> Optional[date]:
    """Next occurrence of a repeating reminder.

    Args:
        due: Current due date
        repeat: Repeat interval

    Returns:
        Next due date, or None for one-time reminders
    """
    step = REPEAT_STEPS.get(repeat)
    if step is None:
        return None
    return due + step


def complete_reminder(
    db: Database, reminder_id: int, now: Optional[datetime] = None
) -> Optional[Reminder]:
    """Complete a reminder.

    Args:
        db: Database instance
        reminder_id: Reminder ID
        now: Completion timestamp (defaults to now)

    Returns:
        The updated reminder, or None if it does not exist
    """
    if now is None:
        now = datetime.now()

    reminder = db.get_reminder(reminder_id)
    if reminder is None:
        return None

    assert reminder.due_date is not None
    next_due = next_due_date(reminder.due_date, reminder.repeat)
    if next_due is None:
        reminder.completed = True
        reminder.completed_at = now
    else:
        reminder.due_date = next_due

    db.update_reminder(reminder)
    logger.info(
        "Reminder completed",
        extra={
            "context": {
                "reminder_id": reminder_id,
                "repeat": reminder.repeat.value,
                "next_due": next_due,
            }
        },
    )
    return reminder


def next_anniversary(original: date, today: date) -> date:
    """Next date (on or after today) with the same month and day.

    February 29 falls on February 28 in non-leap years.
    """
    this_year = original + relativedelta(year=today.year)
    if this_year >= today:
        return this_year
    return original + relativedelta(year=today.year + 1)


def create_reminder_from_date(
    db: Database,
    contact_id: int,
    original: date,
    reminder_type: ReminderType,
    title: str,
    today: Optional[date] = None,
) -> int:
    """Create a yearly reminder for a birthday or anniversary of a contact.

    Returns:
        New reminder ID
    """
    if today is None:
        today = date.today()

    return db.create_reminder(
        Reminder(
            type=reminder_type,
            title=title,
            due_date=next_anniversary(original, today),
            repeat=RepeatInterval.YEARLY,
            contact_ids=[contact_id],
        )
    )
