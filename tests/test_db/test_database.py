"""Tests for database operations."""

import threading
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from kinship.core.exceptions import DatabaseError, ValidationError
from kinship.db.database import Database
from kinship.db.models import (
    Congregation,
    Contact,
    EventSlot,
    EventTemplate,
    Family,
    FixedDayOfMonthRule,
    Interaction,
    InviteGroup,
    Reminder,
    ReminderType,
    RepeatInterval,
    SlotStatus,
    Tag,
    WeeklyRule,
)

TODAY = date(2026, 4, 15)


def _template(db: Database, active: bool = True) -> int:
    return db.create_event_template(
        EventTemplate(
            name="Dinner",
            rule=FixedDayOfMonthRule(day=1),
            time_of_day="18:00",
            active=active,
        )
    )


def _slot(db: Database, template_id: int, slot_date: date, slot_time="18:00") -> int:
    slot_id = db.create_event_slot(
        EventSlot(event_template_id=template_id, slot_date=slot_date, slot_time=slot_time)
    )
    assert slot_id is not None
    return slot_id


class TestDatabaseConnection:
    """Test database connection management."""

    def test_connect_creates_file(self, tmp_path: Path):
        """Connecting creates database file."""
        db_path = tmp_path / "new.db"
        db = Database(str(db_path))
        db.initialize()
        assert db_path.exists()
        db.close()

    def test_connect_memory_database(self):
        """Can connect to memory database."""
        db = Database(":memory:")
        db.close()

    def test_initialize_schema(self, memory_db: Database):
        """Schema initialization creates all required tables."""
        conn = memory_db._get_connection()
        tables = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        ).fetchall()
        table_names = [t[0] for t in tables]

        expected_tables = [
            "congregations",
            "contact_tags",
            "contacts",
            "event_slot_attendees",
            "event_slot_invite_groups",
            "event_slots",
            "event_templates",
            "families",
            "family_tags",
            "interactions",
            "invite_group_members",
            "invite_groups",
            "reminder_contacts",
            "reminder_families",
            "reminders",
            "schema_version",
            "tags",
        ]
        for table in expected_tables:
            assert table in table_names, f"Missing table: {table}"

    def test_initialize_is_idempotent(self, temp_db: Database):
        """Initializing twice keeps one schema version row."""
        temp_db.initialize()
        conn = temp_db._get_connection()
        assert conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0] == 1

    def test_foreign_keys_enabled(self, memory_db: Database):
        """Foreign key enforcement is on."""
        conn = memory_db._get_connection()
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_wal_mode_for_file(self, temp_db: Database):
        """File databases use WAL journaling."""
        conn = temp_db._get_connection()
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"


class TestFamilyAndContactOperations:
    """Test family and contact CRUD."""

    def test_create_and_get_family(self, memory_db: Database, sample_family: Family):
        """Created family can be read back."""
        family_id = memory_db.create_family(sample_family)
        family = memory_db.get_family(family_id)
        assert family is not None
        assert family.name == "Berg"
        assert family.created_at is not None

    def test_get_missing_family_returns_none(self, memory_db: Database):
        """Unknown ID gives None."""
        assert memory_db.get_family(999) is None

    def test_contact_dates_round_trip(self, memory_db: Database, sample_contact: Contact):
        """Birthday is stored and parsed as a date."""
        contact_id = memory_db.create_contact(sample_contact)
        contact = memory_db.get_contact(contact_id)
        assert contact is not None
        assert contact.birthday == date(1985, 4, 20)
        assert contact.wedding_anniversary is None

    def test_update_contact(self, memory_db: Database, sample_contact: Contact):
        """update_contact changes fields and reports success."""
        contact_id = memory_db.create_contact(sample_contact)
        contact = memory_db.get_contact(contact_id)
        assert contact is not None
        contact.phone = "555-0199"
        assert memory_db.update_contact(contact) is True
        updated = memory_db.get_contact(contact_id)
        assert updated is not None and updated.phone == "555-0199"

    def test_update_missing_contact(self, memory_db: Database):
        """Updating a non-existent contact returns False."""
        assert memory_db.update_contact(Contact(id=42, first_name="X", last_name="Y")) is False

    def test_delete_family_detaches_members(self, populated_db: Database):
        """Deleting a family keeps its members with family_id NULL."""
        family = populated_db.get_families()[0]
        assert family.id is not None
        members = populated_db.get_family_members(family.id)
        assert len(members) == 2

        assert populated_db.delete_family(family.id) is True
        for member in members:
            assert member.id is not None
            contact = populated_db.get_contact(member.id)
            assert contact is not None
            assert contact.family_id is None

    def test_search_contacts(self, populated_db: Database):
        """Search matches first name."""
        results = populated_db.get_contacts(search_query="Jon")
        assert [c.first_name for c in results] == ["Jonas"]

    def test_contacts_ordered_by_name(self, populated_db: Database):
        """Contacts are ordered by last then first name."""
        names = [c.first_name for c in populated_db.get_contacts()]
        assert names == ["Anna", "Jonas"]

    def test_people_grouped(self, populated_db: Database):
        """Families by name with members, then contacts without a family."""
        populated_db.create_family(Family(name="Adler"))
        populated_db.create_contact(Contact(first_name="Carl", last_name="Zeta"))
        populated_db.create_contact(Contact(first_name="Beth", last_name="Young"))

        grouped = populated_db.get_people_grouped()
        assert [f.name for f, _ in grouped.families] == ["Adler", "Berg"]
        assert grouped.families[0][1] == []
        assert [m.first_name for m in grouped.families[1][1]] == ["Anna", "Jonas"]
        assert [c.first_name for c in grouped.individuals] == ["Beth", "Carl"]

    def test_people_grouped_empty(self, memory_db: Database):
        """Empty database has no families and no individuals."""
        grouped = memory_db.get_people_grouped()
        assert grouped.families == []
        assert grouped.individuals == []

    def test_congregations(self, memory_db: Database):
        """Congregations are listed by name."""
        memory_db.create_congregation(Congregation(name="Riverside"))
        memory_db.create_congregation(Congregation(name="Hillside", city="Springfield"))
        assert [c.name for c in memory_db.get_congregations()] == ["Hillside", "Riverside"]


class TestTagOperations:
    """Test tags and their links."""

    def test_tag_names_unique(self, memory_db: Database):
        """Duplicate tag name raises DatabaseError."""
        memory_db.create_tag(Tag(name="Friends"))
        with pytest.raises(DatabaseError, match="Failed to create tag"):
            memory_db.create_tag(Tag(name="Friends"))

    def test_attach_and_detach_contact_tag(self, populated_db: Database):
        """Tags attach once and detach cleanly."""
        contact = populated_db.get_contacts()[0]
        assert contact.id is not None
        tag_id = populated_db.create_tag(Tag(name="Choir", color="#ff0000"))

        assert populated_db.add_tag_to_contact(contact.id, tag_id) is True
        assert populated_db.add_tag_to_contact(contact.id, tag_id) is False
        assert [t.name for t in populated_db.get_contact_tags(contact.id)] == ["Choir"]

        assert populated_db.remove_tag_from_contact(contact.id, tag_id) is True
        assert populated_db.get_contact_tags(contact.id) == []

    def test_family_tags(self, populated_db: Database):
        """Tags attach to families."""
        family = populated_db.get_families()[0]
        assert family.id is not None
        tag_id = populated_db.create_tag(Tag(name="Neighbors"))
        populated_db.add_tag_to_family(family.id, tag_id)
        assert [t.id for t in populated_db.get_family_tags(family.id)] == [tag_id]

    def test_update_tag(self, memory_db: Database):
        """Name and color can be changed."""
        tag_id = memory_db.create_tag(Tag(name="Choir"))
        assert memory_db.update_tag(Tag(id=tag_id, name="Worship team", color="#1E40AF")) is True
        tags = memory_db.get_tags()
        assert [(t.name, t.color) for t in tags] == [("Worship team", "#1E40AF")]

    def test_update_tag_rejects_bad_color(self, memory_db: Database):
        """Color must be #RRGGBB."""
        tag_id = memory_db.create_tag(Tag(name="Choir"))
        with pytest.raises(ValidationError, match="RRGGBB"):
            memory_db.update_tag(Tag(id=tag_id, name="Choir", color="blue"))

    def test_update_tag_rejects_blank_name(self, memory_db: Database):
        """Name is required."""
        tag_id = memory_db.create_tag(Tag(name="Choir"))
        with pytest.raises(ValidationError, match="name"):
            memory_db.update_tag(Tag(id=tag_id, name=" "))

    def test_update_tag_to_taken_name(self, memory_db: Database):
        """Renaming onto another tag's name raises DatabaseError."""
        memory_db.create_tag(Tag(name="Friends"))
        tag_id = memory_db.create_tag(Tag(name="Choir"))
        with pytest.raises(DatabaseError, match="Failed to update tag"):
            memory_db.update_tag(Tag(id=tag_id, name="Friends"))

    def test_update_missing_tag(self, memory_db: Database):
        """Unknown tag is not updated."""
        assert memory_db.update_tag(Tag(id=404, name="Ghost")) is False

    def test_delete_tag_detaches(self, populated_db: Database):
        """Deleting a tag removes its links."""
        contact = populated_db.get_contacts()[0]
        assert contact.id is not None
        tag_id = populated_db.create_tag(Tag(name="Temp"))
        populated_db.add_tag_to_contact(contact.id, tag_id)
        assert populated_db.delete_tag(tag_id) is True
        assert populated_db.get_contact_tags(contact.id) == []


class TestInviteGroupOperations:
    """Test invite groups and membership."""

    def test_group_members_loaded(self, populated_db: Database):
        """Group carries its member IDs."""
        group = populated_db.get_invite_groups()[0]
        assert len(group.member_ids) == 2

    def test_update_replaces_members(self, populated_db: Database):
        """Updating a group replaces its member set."""
        group = populated_db.get_invite_groups()[0]
        group.member_ids = group.member_ids[:1]
        group.name = "Anna only"
        assert populated_db.update_invite_group(group) is True
        assert group.id is not None
        reloaded = populated_db.get_invite_group(group.id)
        assert reloaded is not None
        assert reloaded.name == "Anna only"
        assert len(reloaded.member_ids) == 1

    def test_update_missing_group(self, memory_db: Database):
        """Updating an unknown group returns False."""
        assert memory_db.update_invite_group(InviteGroup(id=77, name="Ghost")) is False

    def test_delete_group(self, populated_db: Database):
        """Deleting a group removes it."""
        group = populated_db.get_invite_groups()[0]
        assert group.id is not None
        assert populated_db.delete_invite_group(group.id) is True
        assert populated_db.get_invite_group(group.id) is None


class TestInteractionOperations:
    """Test interaction logging and queries."""

    def test_interactions_newest_first(self, populated_db: Database):
        """Interactions per contact come newest first."""
        contact = populated_db.get_contacts()[0]
        interactions = populated_db.get_interactions(contact_id=contact.id)
        assert [i.type for i in interactions] == ["call", "visit"]
        assert interactions[0].interaction_date == TODAY - timedelta(days=3)

    def test_empty_type_rejected(self, memory_db: Database):
        """Blank interaction type raises ValidationError."""
        with pytest.raises(ValidationError, match="required"):
            memory_db.create_interaction(Interaction(type="  ", interaction_date=TODAY))

    def test_long_type_rejected(self, memory_db: Database):
        """Types over 50 characters are rejected."""
        with pytest.raises(ValidationError, match="50"):
            memory_db.create_interaction(Interaction(type="x" * 51, interaction_date=TODAY))

    def test_missing_date_rejected(self, memory_db: Database):
        """An interaction needs a date."""
        with pytest.raises(ValidationError, match="date"):
            memory_db.create_interaction(Interaction(type="call"))

    def test_datetime_is_stored_as_date(self, memory_db: Database):
        """A datetime interaction date keeps only its date part."""
        interaction_id = memory_db.create_interaction(
            Interaction(type="call", interaction_date=datetime(2026, 4, 1, 15, 30))
        )
        stored = memory_db.get_interactions()
        assert stored[0].id == interaction_id
        assert stored[0].interaction_date == date(2026, 4, 1)

    def test_bulk_interaction(self, memory_db: Database):
        """Bulk logging creates one interaction per group."""
        g1 = memory_db.create_invite_group(InviteGroup(name="A"))
        g2 = memory_db.create_invite_group(InviteGroup(name="B"))
        assert memory_db.create_bulk_interaction([g1, g2], "event", TODAY, notes="Picnic") == 2
        assert len(memory_db.get_interactions(invite_group_id=g1)) == 1
        assert len(memory_db.get_interactions(invite_group_id=g2)) == 1

    def test_interaction_types_distinct_and_sorted(self, populated_db: Database):
        """Each type used is listed once, alphabetically."""
        contact = populated_db.get_contacts()[0]
        populated_db.create_interaction(
            Interaction(contact_id=contact.id, type="coffee", interaction_date=TODAY)
        )
        populated_db.create_interaction(
            Interaction(contact_id=contact.id, type="call", interaction_date=TODAY)
        )
        assert populated_db.get_interaction_types() == ["call", "coffee", "visit"]

    def test_interaction_types_with_suggestions(self, populated_db: Database):
        """Suggested types are merged in without duplicates."""
        populated_db.create_interaction(Interaction(type="coffee", interaction_date=TODAY))
        types = populated_db.get_interaction_types(include_suggested=True)
        assert types == sorted(set(types))
        assert {"coffee", "call", "visit", "email", "meeting"} <= set(types)

    def test_interaction_types_empty(self, memory_db: Database):
        """No interactions means no types."""
        assert memory_db.get_interaction_types() == []

    def test_deleting_contact_deletes_interactions(self, populated_db: Database):
        """Interactions cascade with their contact."""
        contact = populated_db.get_contacts()[0]
        assert contact.id is not None
        populated_db.delete_contact(contact.id)
        assert populated_db.get_interactions(contact_id=contact.id) == []


class TestEventTemplateOperations:
    """Test event template persistence."""

    def test_rule_round_trip(self, memory_db: Database, weekly_template: EventTemplate):
        """The stored rule comes back unchanged."""
        template_id = memory_db.create_event_template(weekly_template)
        template = memory_db.get_event_template(template_id)
        assert template is not None
        assert template.rule == WeeklyRule(day_of_week=3, interval=2)
        assert template.time_of_day == "19:00"
        assert template.active is True

    def test_active_only_listing(self, memory_db: Database):
        """Inactive templates are filtered when asked."""
        _template(memory_db)
        _template(memory_db, active=False)
        assert len(memory_db.get_event_templates()) == 2
        assert len(memory_db.get_event_templates(active_only=True)) == 1

    def test_delete_cascades_slots(self, memory_db: Database):
        """Deleting a template deletes its slots."""
        template_id = _template(memory_db)
        slot_id = _slot(memory_db, template_id, date(2026, 5, 1))
        assert memory_db.delete_event_template(template_id) is True
        assert memory_db.get_event_slot(slot_id) is None

    def test_inconsistent_stored_rule_raises(self, memory_db: Database):
        """A monthly row with both sub-modes cannot be loaded."""
        conn = memory_db._get_connection()
        conn.execute(
            """INSERT INTO event_templates
               (name, recurrence_type, recurrence_interval, recurrence_day_of_week,
                recurrence_day_of_month, recurrence_week_of_month)
               VALUES ('Broken', 'monthly', 1, 1, 15, 2)"""
        )
        conn.commit()
        template_id = conn.execute("SELECT id FROM event_templates").fetchone()[0]
        with pytest.raises(ValidationError):
            memory_db.get_event_template(template_id)


class TestEventSlotOperations:
    """Test slot creation, listing and assignment."""

    def test_duplicate_slot_returns_none(self, memory_db: Database):
        """Second insert for the same template and date is skipped."""
        template_id = _template(memory_db)
        _slot(memory_db, template_id, date(2026, 5, 1))
        duplicate = memory_db.create_event_slot(
            EventSlot(event_template_id=template_id, slot_date=date(2026, 5, 1))
        )
        assert duplicate is None
        assert len(memory_db.get_event_slots(template_id)) == 1

    @pytest.mark.database
    def test_concurrent_writers_create_one_slot(self, temp_db: Database):
        """Two connections racing on the same template and date create one slot."""
        template_id = _template(temp_db)
        writers = [Database(temp_db.db_path), Database(temp_db.db_path)]
        barrier = threading.Barrier(len(writers))
        results: list = []

        def insert(db: Database) -> None:
            barrier.wait()
            results.append(
                db.create_event_slot(
                    EventSlot(event_template_id=template_id, slot_date=date(2026, 5, 1))
                )
            )
            db.close()

        threads = [threading.Thread(target=insert, args=(db,)) for db in writers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 2
        assert results.count(None) == 1
        assert len(temp_db.get_event_slots(template_id)) == 1

    def test_same_date_other_template_allowed(self, memory_db: Database):
        """Uniqueness is per template."""
        t1 = _template(memory_db)
        t2 = _template(memory_db)
        _slot(memory_db, t1, date(2026, 5, 1))
        assert memory_db.create_event_slot(
            EventSlot(event_template_id=t2, slot_date=date(2026, 5, 1))
        ) is not None

    def test_unknown_template_raises(self, memory_db: Database):
        """A foreign key failure is a DatabaseError, not a skip."""
        with pytest.raises(DatabaseError, match="Failed to create event slot"):
            memory_db.create_event_slot(EventSlot(event_template_id=999, slot_date=TODAY))

    def test_upcoming_slots_filter_and_order(self, memory_db: Database):
        """Upcoming lists future slots of active templates by date then time."""
        active = _template(memory_db)
        inactive = _template(memory_db, active=False)
        _slot(memory_db, active, TODAY - timedelta(days=1))
        _slot(memory_db, active, TODAY + timedelta(days=7), "09:00")
        _slot(memory_db, active, TODAY, "20:00")
        _slot(memory_db, inactive, TODAY + timedelta(days=1))

        upcoming = memory_db.get_upcoming_slots(TODAY, limit=10)
        assert [s.slot_date for s in upcoming] == [TODAY, TODAY + timedelta(days=7)]
        assert upcoming[0].template_name == "Dinner"

    def test_upcoming_limit(self, memory_db: Database):
        """Limit caps the result."""
        template_id = _template(memory_db)
        for offset in range(5):
            _slot(memory_db, template_id, TODAY + timedelta(days=offset))
        assert len(memory_db.get_upcoming_slots(TODAY, limit=3)) == 3

    def test_assign_sets_status(self, populated_db: Database):
        """Attaching attendees marks the slot assigned, clearing reverts it."""
        template_id = _template(populated_db)
        slot_id = _slot(populated_db, template_id, TODAY)
        contact = populated_db.get_contacts()[0]
        family = populated_db.get_families()[0]
        assert contact.id is not None and family.id is not None

        assert populated_db.assign_to_slot(slot_id, [contact.id], [family.id]) is True
        slot = populated_db.get_event_slot(slot_id)
        assert slot is not None
        assert slot.status == SlotStatus.ASSIGNED
        assert slot.attendee_count == 2
        attendees = populated_db.get_slot_attendees(slot_id)
        assert all(a["response"] == "pending" for a in attendees)

        populated_db.assign_to_slot(slot_id, [], [])
        slot = populated_db.get_event_slot(slot_id)
        assert slot is not None
        assert slot.status == SlotStatus.AVAILABLE
        assert slot.attendee_count == 0

    def test_assign_keeps_terminal_status(self, populated_db: Database):
        """Completed slots stay completed when attendees change."""
        template_id = _template(populated_db)
        slot_id = _slot(populated_db, template_id, TODAY)
        populated_db.update_slot_status(slot_id, SlotStatus.COMPLETED)
        contact = populated_db.get_contacts()[0]
        assert contact.id is not None

        populated_db.assign_to_slot(slot_id, [contact.id])
        slot = populated_db.get_event_slot(slot_id)
        assert slot is not None
        assert slot.status == SlotStatus.COMPLETED

    def test_assign_missing_slot(self, memory_db: Database):
        """Unknown slot returns False."""
        assert memory_db.assign_to_slot(999, [1]) is False

    def test_assign_invite_groups(self, populated_db: Database):
        """Invite group set on a slot is replaced."""
        template_id = _template(populated_db)
        slot_id = _slot(populated_db, template_id, TODAY)
        group = populated_db.get_invite_groups()[0]
        assert group.id is not None
        populated_db.assign_invite_groups_to_slot(slot_id, [group.id])
        assert populated_db.get_slot_invite_groups(slot_id) == [group.id]
        populated_db.assign_invite_groups_to_slot(slot_id, [])
        assert populated_db.get_slot_invite_groups(slot_id) == []


class TestReminderOperations:
    """Test reminders and their links."""

    def _reminder(self, due: date, **kwargs) -> Reminder:
        return Reminder(type=ReminderType.CALL, title="Call", due_date=due, **kwargs)

    def test_reminder_links_round_trip(self, populated_db: Database):
        """Linked contacts and families come back."""
        contact = populated_db.get_contacts()[0]
        family = populated_db.get_families()[0]
        assert contact.id is not None and family.id is not None
        reminder_id = populated_db.create_reminder(
            self._reminder(TODAY, contact_ids=[contact.id], family_ids=[family.id])
        )
        reminder = populated_db.get_reminder(reminder_id)
        assert reminder is not None
        assert reminder.contact_ids == [contact.id]
        assert reminder.family_ids == [family.id]
        assert reminder.repeat == RepeatInterval.NONE

    def test_overdue_and_upcoming(self, memory_db: Database):
        """Overdue is before today; upcoming is today through the window end."""
        memory_db.create_reminder(self._reminder(TODAY - timedelta(days=2)))
        memory_db.create_reminder(self._reminder(TODAY))
        memory_db.create_reminder(self._reminder(TODAY + timedelta(days=14)))
        memory_db.create_reminder(self._reminder(TODAY + timedelta(days=15)))

        assert len(memory_db.get_overdue_reminders(TODAY)) == 1
        upcoming = memory_db.get_upcoming_reminders(TODAY, TODAY + timedelta(days=14))
        assert [r.due_date for r in upcoming] == [TODAY, TODAY + timedelta(days=14)]

    def test_completed_not_overdue(self, memory_db: Database):
        """Completed reminders are not overdue."""
        reminder_id = memory_db.create_reminder(self._reminder(TODAY - timedelta(days=2)))
        reminder = memory_db.get_reminder(reminder_id)
        assert reminder is not None
        reminder.completed = True
        reminder.completed_at = datetime(2026, 4, 15, 10, 0)
        memory_db.update_reminder(reminder)
        assert memory_db.get_overdue_reminders(TODAY) == []
        reloaded = memory_db.get_reminder(reminder_id)
        assert reloaded is not None and reloaded.completed_at == datetime(2026, 4, 15, 10, 0)

    def test_reminders_for_month(self, memory_db: Database):
        """Only open reminders due inside the month are returned, by date."""
        for due in (date(2026, 3, 31), date(2026, 4, 30), date(2026, 4, 1), date(2026, 5, 1)):
            memory_db.create_reminder(self._reminder(due))
        done_id = memory_db.create_reminder(self._reminder(date(2026, 4, 10)))
        done = memory_db.get_reminder(done_id)
        assert done is not None
        done.completed = True
        memory_db.update_reminder(done)

        april = memory_db.get_reminders_for_month(2026, 4)
        assert [r.due_date for r in april] == [date(2026, 4, 1), date(2026, 4, 30)]

    def test_reminders_for_december(self, memory_db: Database):
        """December runs through the 31st."""
        memory_db.create_reminder(self._reminder(date(2026, 12, 31)))
        memory_db.create_reminder(self._reminder(date(2027, 1, 1)))
        december = memory_db.get_reminders_for_month(2026, 12)
        assert [r.due_date for r in december] == [date(2026, 12, 31)]

    def test_reminders_for_invalid_month(self, memory_db: Database):
        """Month outside 1-12 raises ValidationError."""
        with pytest.raises(ValidationError, match="month"):
            memory_db.get_reminders_for_month(2026, 13)

    def test_reminder_requires_due_date(self, memory_db: Database):
        """Missing due date raises ValidationError."""
        with pytest.raises(ValidationError):
            memory_db.create_reminder(Reminder(title="No date"))


class TestCountsAndRows:
    """Test dashboard counts and raw row dumps."""

    def test_counts(self, populated_db: Database):
        """Counts reflect the populated data."""
        counts = populated_db.get_counts(TODAY)
        assert counts["contacts"] == 2
        assert counts["families"] == 1
        assert counts["reminders"] == 0
        assert counts["upcoming_events"] == 0

    def test_table_rows_whitelist(self, memory_db: Database):
        """Only exportable tables can be dumped."""
        with pytest.raises(DatabaseError, match="cannot be exported"):
            memory_db.get_table_rows("sqlite_master")

    def test_table_rows_are_dicts(self, populated_db: Database):
        """Rows come back as plain dicts."""
        rows = populated_db.get_table_rows("families")
        assert rows[0]["name"] == "Berg"
