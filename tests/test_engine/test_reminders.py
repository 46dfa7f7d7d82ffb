"""Tests for reminder completion and yearly date reminders."""

from datetime import date, datetime

import pytest

from kinship.db.database import Database
from kinship.db.models import Reminder, ReminderType, RepeatInterval
from kinship.engine.reminders import (
    complete_reminder,
    create_reminder_from_date,
    next_anniversary,
    next_due_date,
)

TODAY = date(2026, 4, 15)
NOW = datetime(2026, 4, 15, 9, 30)


class TestNextDueDate:
    """Test repeat stepping."""

    @pytest.mark.parametrize(
        "due,repeat,expected",
        [
            (date(2026, 4, 15), RepeatInterval.WEEKLY, date(2026, 4, 22)),
            (date(2026, 4, 15), RepeatInterval.MONTHLY, date(2026, 5, 15)),
            (date(2026, 1, 31), RepeatInterval.MONTHLY, date(2026, 2, 28)),
            (date(2026, 11, 30), RepeatInterval.QUARTERLY, date(2027, 2, 28)),
            (date(2028, 2, 29), RepeatInterval.YEARLY, date(2029, 2, 28)),
        ],
    )
    def test_steps(self, due, repeat, expected):
        """Month and year steps clamp to month end."""
        assert next_due_date(due, repeat) == expected

    def test_one_time_has_no_next(self):
        """Non-repeating reminders have no next date."""
        assert next_due_date(TODAY, RepeatInterval.NONE) is None


class TestCompleteReminder:
    """Test completing reminders."""

    def test_one_time_marked_completed(self, memory_db: Database):
        """One-time reminder is closed with a timestamp."""
        reminder_id = memory_db.create_reminder(
            Reminder(type=ReminderType.VISIT, title="Visit", due_date=TODAY)
        )
        result = complete_reminder(memory_db, reminder_id, now=NOW)
        assert result is not None
        stored = memory_db.get_reminder(reminder_id)
        assert stored is not None
        assert stored.completed is True
        assert stored.completed_at == NOW
        assert stored.due_date == TODAY

    def test_repeating_moves_forward(self, memory_db: Database):
        """Repeating reminder stays open with the next due date."""
        reminder_id = memory_db.create_reminder(
            Reminder(
                type=ReminderType.CALL,
                title="Call mom",
                due_date=date(2026, 1, 31),
                repeat=RepeatInterval.MONTHLY,
            )
        )
        complete_reminder(memory_db, reminder_id, now=NOW)
        stored = memory_db.get_reminder(reminder_id)
        assert stored is not None
        assert stored.completed is False
        assert stored.due_date == date(2026, 2, 28)

    def test_missing_reminder(self, memory_db: Database):
        """Unknown ID returns None."""
        assert complete_reminder(memory_db, 999, now=NOW) is None


class TestAnniversaries:
    """Test yearly date helpers."""

    def test_later_this_year(self):
        """Birthday later this year stays in this year."""
        assert next_anniversary(date(1985, 4, 20), TODAY) == date(2026, 4, 20)

    def test_today_counts(self):
        """Birthday today is today."""
        assert next_anniversary(date(1985, 4, 15), TODAY) == TODAY

    def test_passed_moves_to_next_year(self):
        """Past birthday moves to next year."""
        assert next_anniversary(date(1985, 1, 2), TODAY) == date(2027, 1, 2)

    def test_leap_day(self):
        """February 29 falls on February 28 in common years."""
        assert next_anniversary(date(1992, 2, 29), date(2026, 1, 10)) == date(2026, 2, 28)
        assert next_anniversary(date(1992, 2, 29), date(2026, 3, 1)) == date(2027, 2, 28)
        assert next_anniversary(date(1992, 2, 29), date(2027, 3, 1)) == date(2028, 2, 29)

    def test_create_reminder_from_date(self, populated_db: Database):
        """Yearly reminder linked to the contact."""
        anna = populated_db.get_contacts(search_query="Anna")[0]
        assert anna.id is not None
        reminder_id = create_reminder_from_date(
            populated_db,
            anna.id,
            date(1985, 4, 20),
            ReminderType.BIRTHDAY,
            "Anna's birthday",
            today=TODAY,
        )
        reminder = populated_db.get_reminder(reminder_id)
        assert reminder is not None
        assert reminder.due_date == date(2026, 4, 20)
        assert reminder.repeat == RepeatInterval.YEARLY
        assert reminder.contact_ids == [anna.id]
