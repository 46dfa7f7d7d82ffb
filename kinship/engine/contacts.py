"""Contact creation with automatic yearly reminders.

A contact saved with a birthday or wedding anniversary gets a yearly
reminder for each date, linked to the contact.

Usage:
    from kinship.engine.contacts import create_contact

    contact_id = create_contact(db, Contact(first_name="Anna", last_name="Berg",
                                            birthday=date(1985, 3, 14)))
"""

from datetime import date
from typing import Optional

from kinship.core.exceptions import DatabaseError, ValidationError
from kinship.core.logging import get_logger
from kinship.db.database import Database
from kinship.db.models import Contact, ReminderType
from kinship.engine.reminders import create_reminder_from_date

logger = get_logger(__name__)

# Reminder title per date field
REMINDER_TITLES = {
    ReminderType.BIRTHDAY: "Birthday: {name}",
    ReminderType.WEDDING_ANNIVERSARY: "Wedding anniversary: {name}",
}


def create_contact(db: Database, contact: Contact, today: Optional[date] = None) -> int:
    """Save a contact and create its birthday and anniversary reminders.

    If a reminder cannot be stored, the contact and the reminders already
    made for it are deleted again.

    Args:
        db: Database instance
        contact: Contact to save
        today: Reference date for the first occurrence (defaults to today)

    Returns:
        New contact ID

    Raises:
        ValidationError: If first or last name is missing
        DatabaseError: "Failed to create contact: ..." on storage failure
    """
    if not contact.first_name or not contact.first_name.strip():
        raise ValidationError("First name is required")
    if not contact.last_name or not contact.last_name.strip():
        raise ValidationError("Last name is required")

    contact_id = db.create_contact(contact)

    dates = [
        (ReminderType.BIRTHDAY, contact.birthday),
        (ReminderType.WEDDING_ANNIVERSARY, contact.wedding_anniversary),
    ]
    created: list[int] = []
    try:
        for reminder_type, original in dates:
            if original is None:
                continue
            reminder_id = create_reminder_from_date(
                db,
                contact_id,
                original,
                reminder_type,
                REMINDER_TITLES[reminder_type].format(name=contact.full_name),
                today=today,
            )
            created.append(reminder_id)
            logger.debug(
                "Date reminder created",
                extra={
                    "context": {
                        "contact_id": contact_id,
                        "reminder_id": reminder_id,
                        "type": reminder_type.value,
                    }
                },
            )
    except DatabaseError as e:
        for reminder_id in created:
            db.delete_reminder(reminder_id)
        db.delete_contact(contact_id)
        raise DatabaseError(f"Failed to create contact: {e}") from e

    return contact_id
