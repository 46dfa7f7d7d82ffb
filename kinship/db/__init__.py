"""Database package - SQLite database and models.

Modules:
    - database: SQLite connection and operations
    - models: Data models, enumerations and recurrence rules
"""

from kinship.db.models import (
    AttendeeResponse,
    Congregation,
    Contact,
    EventSlot,
    EventTemplate,
    Family,
    FixedDayOfMonthRule,
    Interaction,
    InteractionType,
    InviteGroup,
    NthWeekdayRule,
    PeopleGrouped,
    RecurrenceRule,
    RecurrenceType,
    Reminder,
    ReminderType,
    RepeatInterval,
    SlotStatus,
    Tag,
    WeeklyRule,
)

__all__ = [
    # Enums
    "AttendeeResponse",
    "InteractionType",
    "RecurrenceType",
    "ReminderType",
    "RepeatInterval",
    "SlotStatus",
    # Recurrence rules
    "FixedDayOfMonthRule",
    "NthWeekdayRule",
    "RecurrenceRule",
    "WeeklyRule",
    # Dataclasses
    "Congregation",
    "Contact",
    "EventSlot",
    "EventTemplate",
    "Family",
    "Interaction",
    "InviteGroup",
    "PeopleGrouped",
    "Reminder",
    "Tag",
]
