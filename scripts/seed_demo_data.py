"""Create a small demo database for manual smoke checks."""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

from kinship.db.database import Database
from kinship.db.models import (
    Congregation,
    Contact,
    EventTemplate,
    Family,
    Interaction,
    InviteGroup,
    NthWeekdayRule,
    Tag,
    WeeklyRule,
)
from kinship.engine.contacts import create_contact
from kinship.engine.recurrence import create_event_template


def main() -> None:
    demo_dir = Path("data/demo")
    demo_dir.mkdir(parents=True, exist_ok=True)
    demo_db = demo_dir / "kinship_demo.db"

    db = Database(str(demo_db))
    db.initialize()
    today = date.today()

    congregation_id = db.create_congregation(Congregation(name="Riverside", city="Springfield"))
    friends_tag = db.create_tag(Tag(name="Friends", color="#10b981"))

    family_id = db.create_family(
        Family(name="Berg", phone="555-0100", congregation_id=congregation_id)
    )
    db.add_tag_to_family(family_id, friends_tag)

    anna_id = create_contact(
        db,
        Contact(
            first_name="Anna",
            last_name="Berg",
            family_id=family_id,
            congregation_id=congregation_id,
            birthday=date(1985, 3, 14),
            wedding_anniversary=date(2010, 6, 12),
        ),
        today=today,
    )
    jonas_id = create_contact(db, Contact(first_name="Jonas", last_name="Berg", family_id=family_id))

    group_id = db.create_invite_group(
        InviteGroup(name="Berg household", family_id=family_id, member_ids=[anna_id, jonas_id])
    )

    db.create_interaction(
        Interaction(contact_id=anna_id, type="call", interaction_date=today - timedelta(days=3))
    )
    db.create_interaction(
        Interaction(
            invite_group_id=group_id, type="visit", interaction_date=today - timedelta(days=40)
        )
    )

    create_event_template(
        db,
        EventTemplate(
            name="Sunday lunch",
            category="meal",
            rule=WeeklyRule(day_of_week=0, interval=2),
            time_of_day="12:30",
        ),
    )
    create_event_template(
        db,
        EventTemplate(
            name="Game night",
            rule=NthWeekdayRule(week=1, day_of_week=5),
            time_of_day="19:00",
        ),
    )

    db.close()

    print(f"Demo database ready: {demo_db}")


if __name__ == "__main__":
    main()
