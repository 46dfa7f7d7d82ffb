"""Data models and enumerations for Kinship.

All enums stored as TEXT in SQLite.
Dataclasses use frozen=False for mutability during processing, except the
recurrence rules which are immutable values.

This module defines:
    - Enumerations for all categorical fields
    - Recurrence rules (weekly, fixed day of month, Nth weekday)
    - Dataclasses for database records
    - Conversion between recurrence rules and their storage columns
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from kinship.core.exceptions import ValidationError

# =============================================================================
# ENUMERATIONS
# =============================================================================


class RecurrenceType(str, Enum):
    """How an event template repeats."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"


class SlotStatus(str, Enum):
    """Lifecycle of a generated event slot.

    Values:
        AVAILABLE: Freshly generated, nobody attached
        ASSIGNED: One or more contacts/families attached
        COMPLETED: Took place (terminal)
        CANCELLED: Called off (terminal)
    """

    AVAILABLE = "available"
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_SLOT_STATUSES = frozenset({SlotStatus.COMPLETED, SlotStatus.CANCELLED})


class InteractionType(str, Enum):
    """Well-known interaction categories.

    Interaction.type is free-form; these are the values the UI offers.
    """

    CALL = "call"
    VISIT = "visit"
    MESSAGE = "message"
    EMAIL = "email"
    MEETING = "meeting"
    EVENT = "event"
    OTHER = "other"


class ReminderType(str, Enum):
    """What a reminder is about."""

    BIRTHDAY = "birthday"
    WEDDING_ANNIVERSARY = "wedding_anniversary"
    VISIT = "visit"
    CALL = "call"
    OTHER = "other"


class RepeatInterval(str, Enum):
    """How a reminder repeats after completion."""

    NONE = "none"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class AttendeeResponse(str, Enum):
    """Response of someone invited to an event slot."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


# Days of week use Sunday=0 .. Saturday=6 throughout the application.
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

LAST_WEEK_OF_MONTH = 5
MAX_INTERACTION_TYPE_LENGTH = 50
TAG_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def day_of_week(value: date) -> int:
    """Return the Sunday=0 weekday index of a date."""
    return (value.weekday() + 1) % 7


# =============================================================================
# RECURRENCE RULES
# =============================================================================


@dataclass(frozen=True)
class WeeklyRule:
    """Every `interval` weeks on `day_of_week` (Sunday=0)."""

    day_of_week: int
    interval: int = 1

    def __post_init__(self) -> None:
        _check_interval(self.interval)
        _check_range("day_of_week", self.day_of_week, 0, 6)


@dataclass(frozen=True)
class FixedDayOfMonthRule:
    """Every `interval` months on calendar day `day` (1-31)."""

    day: int
    interval: int = 1

    def __post_init__(self) -> None:
        _check_interval(self.interval)
        _check_range("day", self.day, 1, 31)


@dataclass(frozen=True)
class NthWeekdayRule:
    """Every `interval` months on the `week`-th `day_of_week` of the month.

    week=5 asks for a fifth occurrence; months without one are skipped.
    """

    week: int
    day_of_week: int
    interval: int = 1

    def __post_init__(self) -> None:
        _check_interval(self.interval)
        _check_range("week", self.week, 1, LAST_WEEK_OF_MONTH)
        _check_range("day_of_week", self.day_of_week, 0, 6)


RecurrenceRule = Union[WeeklyRule, FixedDayOfMonthRule, NthWeekdayRule]


def _check_interval(interval: int) -> None:
    if interval < 1:
        raise ValidationError(f"Recurrence interval must be positive, got {interval}")


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValidationError(f"{name} must be between {low} and {high}, got {value}")


def rule_from_columns(
    recurrence_type: str,
    interval: Optional[int],
    day_of_week: Optional[int],
    day_of_month: Optional[int],
    week_of_month: Optional[int],
) -> RecurrenceRule:
    """Build a recurrence rule from the four nullable storage columns.

    Args:
        recurrence_type: "weekly" or "monthly"
        interval: Repeat every N weeks/months (None means 1)
        day_of_week: Sunday=0 weekday
        day_of_month: Calendar day for fixed-day monthly rules
        week_of_month: Occurrence number for Nth-weekday monthly rules

    Returns:
        The matching rule

    Raises:
        ValidationError: If the columns describe no rule or two rules at once
    """
    try:
        rtype = RecurrenceType(recurrence_type)
    except ValueError as e:
        raise ValidationError(f"Unknown recurrence type: {recurrence_type!r}") from e

    step = interval if interval is not None else 1

    if rtype == RecurrenceType.WEEKLY:
        if day_of_week is None:
            raise ValidationError("Weekly recurrence requires a day of week")
        return WeeklyRule(day_of_week=day_of_week, interval=step)

    has_fixed = day_of_month is not None
    has_nth = week_of_month is not None
    if has_fixed and has_nth:
        raise ValidationError(
            "Monthly recurrence takes either a day of month or a week of month, not both"
        )
    if has_fixed:
        return FixedDayOfMonthRule(day=day_of_month, interval=step)  # type: ignore[arg-type]
    if has_nth:
        if day_of_week is None:
            raise ValidationError("Nth-weekday recurrence requires a day of week")
        return NthWeekdayRule(
            week=week_of_month, day_of_week=day_of_week, interval=step  # type: ignore[arg-type]
        )
    raise ValidationError("Monthly recurrence requires a day of month or a week of month")


def rule_to_columns(rule: RecurrenceRule) -> dict[str, Optional[object]]:
    """Flatten a recurrence rule into its storage columns."""
    columns: dict[str, Optional[object]] = {
        "recurrence_type": RecurrenceType.MONTHLY.value,
        "recurrence_interval": rule.interval,
        "recurrence_day_of_week": None,
        "recurrence_day_of_month": None,
        "recurrence_week_of_month": None,
    }
    if isinstance(rule, WeeklyRule):
        columns["recurrence_type"] = RecurrenceType.WEEKLY.value
        columns["recurrence_day_of_week"] = rule.day_of_week
    elif isinstance(rule, FixedDayOfMonthRule):
        columns["recurrence_day_of_month"] = rule.day
    elif isinstance(rule, NthWeekdayRule):
        columns["recurrence_day_of_week"] = rule.day_of_week
        columns["recurrence_week_of_month"] = rule.week
    else:
        raise ValidationError(f"Unsupported recurrence rule: {rule!r}")
    return columns


def describe_rule(rule: RecurrenceRule) -> str:
    """Short human description, e.g. "every 2 weeks on Wednesday"."""
    if isinstance(rule, WeeklyRule):
        every = "every week" if rule.interval == 1 else f"every {rule.interval} weeks"
        return f"{every} on {DAY_NAMES[rule.day_of_week]}"
    every = "every month" if rule.interval == 1 else f"every {rule.interval} months"
    if isinstance(rule, FixedDayOfMonthRule):
        return f"{every} on day {rule.day}"
    ordinal = {1: "1st", 2: "2nd", 3: "3rd", 4: "4th", 5: "5th"}[rule.week]
    return f"{every} on the {ordinal} {DAY_NAMES[rule.day_of_week]}"


# =============================================================================
# DATACLASSES
# =============================================================================


@dataclass
class Congregation:
    """Congregation a contact or family belongs to."""

    id: Optional[int] = None
    name: str = ""
    city: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Family:
    """Household record.

    Attributes:
        id: Primary key
        name: Display name ("Smith Family")
        phone: Household phone
        email: Household email
        address: Postal address
        congregation_id: Foreign key to congregation
        notes: Free-form notes
        photo_url: Picture shown in lists
        created_at: Record creation time
        updated_at: Last update time
    """

    id: Optional[int] = None
    name: str = ""
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    congregation_id: Optional[int] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Contact:
    """Person record.

    Attributes:
        id: Primary key
        first_name: First name
        last_name: Last name
        phone: Phone number
        email: Email address
        address: Postal address
        congregation_id: Foreign key to congregation
        family_id: Foreign key to family (None for individuals)
        birthday: Date of birth
        wedding_anniversary: Wedding date
        notes: Free-form notes
        photo_url: Picture shown in lists
        created_at: Record creation time
        updated_at: Last update time
    """

    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    congregation_id: Optional[int] = None
    family_id: Optional[int] = None
    birthday: Optional[date] = None
    wedding_anniversary: Optional[date] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        """Return full name."""
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class Tag:
    """User-defined label for contacts and families."""

    id: Optional[int] = None
    name: str = ""
    color: str = "#6b7280"
    created_at: Optional[datetime] = None


@dataclass
class PeopleGrouped:
    """Everybody, as families with their members plus contacts without a family.

    Attributes:
        families: (family, members) pairs ordered by family name
        individuals: Contacts that belong to no family
    """

    families: list[tuple[Family, list[Contact]]] = field(default_factory=list)
    individuals: list[Contact] = field(default_factory=list)


@dataclass
class InviteGroup:
    """A set of contacts that is usually invited together.

    Attributes:
        id: Primary key
        name: Display name
        family_id: Family the group is drawn from (optional)
        notes: Free-form notes
        member_ids: Contact IDs in the group
        created_at: Record creation time
        updated_at: Last update time
    """

    id: Optional[int] = None
    name: str = ""
    family_id: Optional[int] = None
    notes: Optional[str] = None
    member_ids: list[int] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Interaction:
    """Logged contact with a person, family or invite group.

    interaction_date is when it happened; created_at is when it was logged.
    """

    id: Optional[int] = None
    contact_id: Optional[int] = None
    family_id: Optional[int] = None
    invite_group_id: Optional[int] = None
    type: str = InteractionType.OTHER.value
    notes: Optional[str] = None
    interaction_date: Optional[date] = None
    created_at: Optional[datetime] = None


@dataclass
class EventTemplate:
    """Recurring event definition.

    Attributes:
        id: Primary key
        name: Display name
        rule: Recurrence rule (weekly, fixed day of month or Nth weekday)
        description: Longer description
        category: Event category
        time_of_day: "HH:MM" copied onto every generated slot
        max_attendees: Capacity hint for the UI
        active: Inactive templates generate no slots and are hidden from upcoming
        created_at: Record creation time
        updated_at: Last update time
    """

    id: Optional[int] = None
    name: str = ""
    rule: RecurrenceRule = field(default_factory=lambda: WeeklyRule(day_of_week=0))
    description: Optional[str] = None
    category: Optional[str] = None
    time_of_day: Optional[str] = None
    max_attendees: Optional[int] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def recurrence_type(self) -> RecurrenceType:
        if isinstance(self.rule, WeeklyRule):
            return RecurrenceType.WEEKLY
        return RecurrenceType.MONTHLY


@dataclass
class EventSlot:
    """One concrete occurrence of an event template."""

    id: Optional[int] = None
    event_template_id: int = 0
    slot_date: Optional[date] = None
    slot_time: Optional[str] = None
    status: SlotStatus = SlotStatus.AVAILABLE
    attendee_count: int = 0
    template_name: Optional[str] = None
    template_category: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Reminder:
    """Dated reminder, optionally linked to contacts and families.

    Attributes:
        id: Primary key
        type: What the reminder is about
        title: Short title
        description: Longer text
        due_date: When it is due
        repeat: Repeat interval applied on completion
        completed: Done flag (only set for non-repeating reminders)
        completed_at: When it was marked done
        contact_ids: Linked contacts
        family_ids: Linked families
        created_at: Record creation time
    """

    id: Optional[int] = None
    type: ReminderType = ReminderType.OTHER
    title: str = ""
    description: Optional[str] = None
    due_date: Optional[date] = None
    repeat: RepeatInterval = RepeatInterval.NONE
    completed: bool = False
    completed_at: Optional[datetime] = None
    contact_ids: list[int] = field(default_factory=list)
    family_ids: list[int] = field(default_factory=list)
    created_at: Optional[datetime] = None
