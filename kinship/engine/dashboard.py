"""Dashboard figures: counts and upcoming birthdays."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from kinship.core.logging import get_logger
from kinship.db.database import Database
from kinship.engine.reminders import next_anniversary

logger = get_logger(__name__)

DEFAULT_BIRTHDAY_WINDOW = 14


@dataclass
class DashboardStats:
    """Headline counts."""

    contacts: int = 0
    families: int = 0
    reminders: int = 0
    overdue: int = 0
    upcoming_events: int = 0


@dataclass
class UpcomingBirthday:
    """A contact whose birthday falls inside the window."""

    contact_id: int
    first_name: str
    last_name: str
    birthday: date
    next_birthday: date
    days_until: int
    photo_url: Optional[str] = None


def get_stats(db: Database, today: Optional[date] = None) -> DashboardStats:
    """Contacts, families, open and overdue reminders, upcoming slots."""
    if today is None:
        today = date.today()
    counts = db.get_counts(today)
    return DashboardStats(
        contacts=counts["contacts"],
        families=counts["families"],
        reminders=counts["reminders"],
        overdue=counts["overdue"],
        upcoming_events=counts["upcoming_events"],
    )


def get_upcoming_birthdays(
    db: Database, days: int = DEFAULT_BIRTHDAY_WINDOW, today: Optional[date] = None
) -> list[UpcomingBirthday]:
    """Birthdays within the next `days` days, soonest first.

    Args:
        db: Database instance
        days: Window length in days (today counts as 0)
        today: Reference date (defaults to today)

    Returns:
        Upcoming birthdays sorted by days until
    """
    if today is None:
        today = date.today()

    results = []
    for contact in db.get_contacts_with_birthdays():
        assert contact.birthday is not None and contact.id is not None
        upcoming = next_anniversary(contact.birthday, today)
        days_until = (upcoming - today).days
        if days_until <= days:
            results.append(
                UpcomingBirthday(
                    contact_id=contact.id,
                    first_name=contact.first_name,
                    last_name=contact.last_name,
                    birthday=contact.birthday,
                    next_birthday=upcoming,
                    days_until=days_until,
                    photo_url=contact.photo_url,
                )
            )

    results.sort(key=lambda b: (b.days_until, b.last_name, b.first_name))
    logger.debug(
        "Upcoming birthdays", extra={"context": {"days": days, "count": len(results)}}
    )
    return results
