"""Recurring event slot generation.

An event template carries one recurrence rule:
    1. Weekly: every N weeks on a weekday
    2. Fixed day of month: every N months on day D (clamped to month length)
    3. Nth weekday: every N months on the Nth weekday (months without one are skipped)

Slots are generated for the window [today, today + months] and inserted
create-or-skip, so running generation again only fills gaps.

Usage:
    from kinship.engine.recurrence import create_event_template, generate_slots

    template_id = create_event_template(db, template)
    created = generate_slots(db, template_id, months=3)
"""

from datetime import date, datetime, timedelta
from typing import Optional

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from kinship.core.exceptions import DatabaseError, ValidationError
from kinship.core.logging import get_logger
from kinship.db.database import Database
from kinship.db.models import (
    EventSlot,
    EventTemplate,
    FixedDayOfMonthRule,
    NthWeekdayRule,
    RecurrenceRule,
    SlotStatus,
    WeeklyRule,
)

logger = get_logger(__name__)

DEFAULT_MONTHS_AHEAD = 3

# dateutil weekdays indexed by the Sunday=0 convention used in storage
_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)


# =============================================================================
# DATE ENUMERATION
# =============================================================================


def window_end(today: date, months: int) -> date:
    """Last date (inclusive) of a generation window."""
    return today + relativedelta(months=months)


def _weekly_dates(rule: WeeklyRule, today: date, end: date) -> list[date]:
    start = today + relativedelta(weekday=_WEEKDAYS[rule.day_of_week](+1))
    step = timedelta(weeks=rule.interval)

    dates = []
    k = 0
    while True:
        current = start + step * k
        if current > end:
            break
        dates.append(current)
        k += 1
    return dates


def _fixed_day_dates(rule: FixedDayOfMonthRule, today: date, end: date) -> list[date]:
    month_start = today.replace(day=1)

    def candidate(offset: int) -> date:
        # relativedelta clamps day=31 to the last day of shorter months
        return month_start + relativedelta(months=offset, day=rule.day)

    first = 1 if candidate(0) < today else 0

    dates = []
    k = 0
    while True:
        current = candidate(first + k * rule.interval)
        if current > end:
            break
        dates.append(current)
        k += 1
    return dates


def _nth_weekday_dates(rule: NthWeekdayRule, today: date, end: date) -> list[date]:
    month_start = today.replace(day=1)
    weekday = _WEEKDAYS[rule.day_of_week]

    dates = []
    k = 0
    while True:
        current_month = month_start + relativedelta(months=k * rule.interval)
        if current_month > end:
            break
        target = current_month + relativedelta(weekday=weekday(+rule.week))
        if target.month == current_month.month and today <= target <= end:
            dates.append(target)
        k += 1
    return dates


def enumerate_slot_dates(
    rule: RecurrenceRule, today: date, months: int = DEFAULT_MONTHS_AHEAD
) -> list[date]:
    """List every date a rule falls on within [today, today + months].

    Args:
        rule: Recurrence rule
        today: First day of the window
        months: Window length in months

    Returns:
        Ascending list of distinct dates

    Raises:
        ValidationError: If months is not positive or the rule type is unknown
    """
    if months < 1:
        raise ValidationError(f"Months ahead must be at least 1, got {months}")

    end = window_end(today, months)
    if isinstance(rule, WeeklyRule):
        return _weekly_dates(rule, today, end)
    if isinstance(rule, FixedDayOfMonthRule):
        return _fixed_day_dates(rule, today, end)
    if isinstance(rule, NthWeekdayRule):
        return _nth_weekday_dates(rule, today, end)
    raise ValidationError(f"Unsupported recurrence rule: {rule!r}")


# =============================================================================
# SLOT GENERATION
# =============================================================================


def generate_slots(
    db: Database,
    template_id: int,
    months: int = DEFAULT_MONTHS_AHEAD,
    today: Optional[date] = None,
) -> int:
    """Create the missing slots of a template for the coming months.

    Dates that already have a slot are skipped. A missing or inactive
    template generates nothing.

    Args:
        db: Database instance
        template_id: Event template ID
        months: Window length in months
        today: Window start (defaults to today)

    Returns:
        Number of slots created

    Raises:
        DatabaseError: If a slot insert fails for any reason other than a duplicate
    """
    if today is None:
        today = date.today()

    template = db.get_event_template(template_id)
    if template is None:
        logger.warning(
            "Slot generation for unknown template",
            extra={"context": {"template_id": template_id}},
        )
        return 0
    if not template.active:
        logger.debug(
            "Template inactive, no slots generated",
            extra={"context": {"template_id": template_id}},
        )
        return 0

    created = 0
    skipped = 0
    for slot_date in enumerate_slot_dates(template.rule, today, months):
        slot_id = db.create_event_slot(
            EventSlot(
                event_template_id=template_id,
                slot_date=slot_date,
                slot_time=template.time_of_day,
                status=SlotStatus.AVAILABLE,
            )
        )
        if slot_id is None:
            skipped += 1
            logger.debug(
                "Slot already exists",
                extra={"context": {"template_id": template_id, "slot_date": slot_date}},
            )
        else:
            created += 1

    logger.info(
        "Slots generated",
        extra={
            "context": {
                "template_id": template_id,
                "created": created,
                "skipped": skipped,
                "months": months,
            }
        },
    )
    return created


def generate_all_slots(
    db: Database, months: int = DEFAULT_MONTHS_AHEAD, today: Optional[date] = None
) -> dict[int, int]:
    """Top up slots for every active template.

    Returns:
        Mapping of template ID to number of slots created
    """
    results: dict[int, int] = {}
    for template in db.get_event_templates(active_only=True):
        assert template.id is not None
        results[template.id] = generate_slots(db, template.id, months=months, today=today)
    return results


# =============================================================================
# TEMPLATE LIFECYCLE
# =============================================================================


def validate_time_of_day(value: Optional[str]) -> None:
    """Check an "HH:MM" time string.

    Raises:
        ValidationError: If the value is not a valid 24-hour time
    """
    if value is None:
        return
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError as e:
        raise ValidationError(f"Time of day must be HH:MM, got {value!r}") from e


def create_event_template(
    db: Database,
    template: EventTemplate,
    months: int = DEFAULT_MONTHS_AHEAD,
    today: Optional[date] = None,
) -> int:
    """Save a new template and generate its first window of slots.

    If generation fails the template is deleted again before the error is
    raised, so the caller never sees a template without its slots.

    Returns:
        New template ID

    Raises:
        ValidationError: If the name or time of day is invalid
        DatabaseError: "Failed to create event template: ..." on storage failure
    """
    if not template.name or not template.name.strip():
        raise ValidationError("Event template name is required")
    validate_time_of_day(template.time_of_day)

    template_id = db.create_event_template(template)
    logger.info(
        "Event template created",
        extra={"context": {"template_id": template_id, "name": template.name}},
    )

    try:
        generate_slots(db, template_id, months=months, today=today)
    except DatabaseError as e:
        # A failed create leaves neither the template nor any of its slots
        db.delete_event_template(template_id)
        logger.error(
            "Event template removed after slot generation failed",
            extra={"context": {"template_id": template_id, "error": str(e)}},
        )
        raise DatabaseError(f"Failed to create event template: {e}") from e

    return template_id


def update_event_template(
    db: Database,
    template: EventTemplate,
    months: int = DEFAULT_MONTHS_AHEAD,
    today: Optional[date] = None,
) -> bool:
    """Save template changes and fill the window for the new rule.

    Existing slots are not moved or removed.

    Returns:
        True if the template existed and was updated
    """
    validate_time_of_day(template.time_of_day)
    if not db.update_event_template(template):
        return False

    assert template.id is not None
    generate_slots(db, template.id, months=months, today=today)
    return True


def delete_event_template(db: Database, template_id: int) -> bool:
    """Delete a template together with all of its slots."""
    deleted = db.delete_event_template(template_id)
    if deleted:
        logger.info("Event template deleted", extra={"context": {"template_id": template_id}})
    return deleted
