"""Engine package - Business logic layer.

Modules:
    - contacts: Contact creation with birthday/anniversary reminders
    - recurrence: Event template rules and slot generation
    - scoring: Relationship scoring algorithm
    - reminders: Reminder completion and yearly date reminders
    - dashboard: Counts and upcoming birthdays
    - export: Full data export (JSON, Excel)
"""

from kinship.engine.contacts import create_contact
from kinship.engine.recurrence import (
    create_event_template,
    delete_event_template,
    enumerate_slot_dates,
    generate_all_slots,
    generate_slots,
    update_event_template,
)
from kinship.engine.scoring import (
    RelationshipScore,
    ScoreLevel,
    compute_score,
    get_contact_score,
    get_family_score,
    get_invite_group_score,
    get_invite_groups_with_scores,
)

__all__ = [
    # Contacts
    "create_contact",
    # Recurrence
    "create_event_template",
    "delete_event_template",
    "enumerate_slot_dates",
    "generate_all_slots",
    "generate_slots",
    "update_event_template",
    # Scoring
    "RelationshipScore",
    "ScoreLevel",
    "compute_score",
    "get_contact_score",
    "get_family_score",
    "get_invite_group_score",
    "get_invite_groups_with_scores",
]
