"""SQLite database connection and operations for Kinship.

Provides:
    - Connection management with WAL mode
    - Schema creation
    - CRUD operations for all tables
    - Create-or-skip insertion of event slots

Usage:
    from kinship.db.database import Database

    db = Database()
    db.initialize()

    contact_id = db.create_contact(Contact(first_name="Anna", last_name="Berg"))
"""

import re
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Optional

from dateutil.relativedelta import relativedelta

from kinship.core.config import get_config
from kinship.core.exceptions import DatabaseError, ValidationError
from kinship.core.logging import get_logger
from kinship.db.models import (
    MAX_INTERACTION_TYPE_LENGTH,
    TAG_COLOR_PATTERN,
    TERMINAL_SLOT_STATUSES,
    AttendeeResponse,
    Congregation,
    Contact,
    EventSlot,
    EventTemplate,
    Family,
    Interaction,
    InteractionType,
    InviteGroup,
    PeopleGrouped,
    Reminder,
    ReminderType,
    RepeatInterval,
    SlotStatus,
    Tag,
    rule_from_columns,
    rule_to_columns,
)

logger = get_logger(__name__)


# Schema version for migrations
SCHEMA_VERSION = 1

# Tables that may be dumped wholesale by the exporter
EXPORTABLE_TABLES = (
    "congregations",
    "contacts",
    "families",
    "tags",
    "contact_tags",
    "family_tags",
    "reminders",
    "reminder_contacts",
    "reminder_families",
    "interactions",
    "invite_groups",
    "invite_group_members",
    "event_templates",
    "event_slots",
    "event_slot_attendees",
    "event_slot_invite_groups",
)


def _to_date(value: Any) -> Optional[date]:
    """Parse a stored DATE column."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _to_datetime(value: Any) -> Optional[datetime]:
    """Parse a stored TIMESTAMP column."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _date_str(value: Optional[date]) -> Optional[str]:
    """Serialize a date (or the date part of a datetime) for storage."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _is_slot_conflict(error: sqlite3.IntegrityError) -> bool:
    """True if the error is the (template, date) uniqueness violation."""
    message = str(error)
    return "UNIQUE constraint failed" in message and "event_slots.slot_date" in message


class Database:
    """SQLite database manager.

    Attributes:
        db_path: Path to database file
    """

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database.

        Args:
            db_path: Path to database file. Use ":memory:" for in-memory.
                    Defaults to config path.
        """
        if db_path is None:
            config = get_config()
            self.db_path = str(config.db_path)
        else:
            self.db_path = db_path

        self._conn: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            try:
                # Directory for file databases
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

                self._conn = sqlite3.connect(self.db_path)
                self._conn.row_factory = sqlite3.Row

                # Cascades and SET NULL rely on this
                self._conn.execute("PRAGMA foreign_keys = ON")

                # WAL lets readers run beside a slot generation run
                if self.db_path != ":memory:":
                    self._conn.execute("PRAGMA journal_mode = WAL")

            except sqlite3.Error as e:
                raise DatabaseError(f"Cannot connect to database: {e}") from e

        return self._conn

    @staticmethod
    def _lastrowid(cursor: sqlite3.Cursor) -> int:
        """Extract lastrowid from cursor (always set after INSERT in SQLite)."""
        row_id = cursor.lastrowid
        assert row_id is not None, "lastrowid was None after INSERT"
        return row_id

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def initialize(self) -> None:
        """Create schema if not exists."""
        conn = self._get_connection()

        try:
            conn.executescript(self._get_schema_ddl())
            conn.commit()
            logger.info("Database initialized", extra={"context": {"path": self.db_path}})
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot initialize database: {e}") from e

    def _get_schema_ddl(self) -> str:
        """Return complete schema DDL."""
        return """
        -- Congregations
        CREATE TABLE IF NOT EXISTS congregations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            city TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        -- Families
        CREATE TABLE IF NOT EXISTS families (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            phone TEXT,
            email TEXT,
            address TEXT,
            congregation_id INTEGER,
            notes TEXT,
            photo_url TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (congregation_id) REFERENCES congregations(id) ON DELETE SET NULL
        );

        -- Contacts
        CREATE TABLE IF NOT EXISTS contacts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            phone TEXT,
            email TEXT,
            address TEXT,
            congregation_id INTEGER,
            family_id INTEGER,
            birthday DATE,
            wedding_anniversary DATE,
            notes TEXT,
            photo_url TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (congregation_id) REFERENCES congregations(id) ON DELETE SET NULL,
            FOREIGN KEY (family_id) REFERENCES families(id) ON DELETE SET NULL
        );

        CREATE INDEX IF NOT EXISTS idx_contacts_family ON contacts(family_id);
        CREATE INDEX IF NOT EXISTS idx_contacts_name ON contacts(last_name, first_name);

        -- Tags
        CREATE TABLE IF NOT EXISTS tags (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            color TEXT NOT NULL DEFAULT '#6b7280',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS contact_tags (
            contact_id INTEGER NOT NULL,
            tag_id INTEGER NOT NULL,
            FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE CASCADE,
            FOREIGN KEY (tag_id) REFERENCES tags(id) ON DELETE CASCADE,
            UNIQUE(contact_id, tag_id)
        );

        CREATE TABLE IF NOT EXISTS family_tags (
            family_id INTEGER NOT NULL,
            tag_id INTEGER NOT NULL,
            FOREIGN KEY (family_id) REFERENCES families(id) ON DELETE CASCADE,
            FOREIGN KEY (tag_id) REFERENCES tags(id) ON DELETE CASCADE,
            UNIQUE(family_id, tag_id)
        );

        -- Invite Groups
        CREATE TABLE IF NOT EXISTS invite_groups (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            family_id INTEGER,
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (family_id) REFERENCES families(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS invite_group_members (
            invite_group_id INTEGER NOT NULL,
            contact_id INTEGER NOT NULL,
            FOREIGN KEY (invite_group_id) REFERENCES invite_groups(id) ON DELETE CASCADE,
            FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE CASCADE,
            UNIQUE(invite_group_id, contact_id)
        );

        -- Interactions
        CREATE TABLE IF NOT EXISTS interactions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            contact_id INTEGER,
            family_id INTEGER,
            invite_group_id INTEGER,
            type TEXT NOT NULL,
            notes TEXT,
            interaction_date DATE NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE CASCADE,
            FOREIGN KEY (family_id) REFERENCES families(id) ON DELETE CASCADE,
            FOREIGN KEY (invite_group_id) REFERENCES invite_groups(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_interactions_contact ON interactions(contact_id);
        CREATE INDEX IF NOT EXISTS idx_interactions_family ON interactions(family_id);
        CREATE INDEX IF NOT EXISTS idx_interactions_group ON interactions(invite_group_id);
        CREATE INDEX IF NOT EXISTS idx_interactions_date ON interactions(interaction_date);

        -- Event Templates
        CREATE TABLE IF NOT EXISTS event_templates (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT,
            category TEXT,
            recurrence_type TEXT NOT NULL CHECK (recurrence_type IN ('weekly', 'monthly')),
            recurrence_interval INTEGER NOT NULL DEFAULT 1,
            recurrence_day_of_week INTEGER,
            recurrence_day_of_month INTEGER,
            recurrence_week_of_month INTEGER,
            time_of_day TEXT,
            max_attendees INTEGER,
            active BOOLEAN NOT NULL DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        -- Event Slots
        CREATE TABLE IF NOT EXISTS event_slots (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            event_template_id INTEGER NOT NULL,
            slot_date DATE NOT NULL,
            slot_time TEXT,
            status TEXT NOT NULL DEFAULT 'available',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (event_template_id) REFERENCES event_templates(id) ON DELETE CASCADE,
            UNIQUE(event_template_id, slot_date)
        );

        CREATE INDEX IF NOT EXISTS idx_event_slots_date ON event_slots(slot_date);

        CREATE TABLE IF NOT EXISTS event_slot_attendees (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            event_slot_id INTEGER NOT NULL,
            contact_id INTEGER,
            family_id INTEGER,
            response TEXT NOT NULL DEFAULT 'pending',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (event_slot_id) REFERENCES event_slots(id) ON DELETE CASCADE,
            FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE CASCADE,
            FOREIGN KEY (family_id) REFERENCES families(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_attendees_slot ON event_slot_attendees(event_slot_id);

        CREATE TABLE IF NOT EXISTS event_slot_invite_groups (
            event_slot_id INTEGER NOT NULL,
            invite_group_id INTEGER NOT NULL,
            FOREIGN KEY (event_slot_id) REFERENCES event_slots(id) ON DELETE CASCADE,
            FOREIGN KEY (invite_group_id) REFERENCES invite_groups(id) ON DELETE CASCADE,
            UNIQUE(event_slot_id, invite_group_id)
        );

        -- Reminders
        CREATE TABLE IF NOT EXISTS reminders (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            type TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            due_date DATE NOT NULL,
            repeat TEXT NOT NULL DEFAULT 'none',
            completed BOOLEAN NOT NULL DEFAULT 0,
            completed_at TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_reminders_due ON reminders(due_date);

        CREATE TABLE IF NOT EXISTS reminder_contacts (
            reminder_id INTEGER NOT NULL,
            contact_id INTEGER NOT NULL,
            FOREIGN KEY (reminder_id) REFERENCES reminders(id) ON DELETE CASCADE,
            FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE CASCADE,
            UNIQUE(reminder_id, contact_id)
        );

        CREATE TABLE IF NOT EXISTS reminder_families (
            reminder_id INTEGER NOT NULL,
            family_id INTEGER NOT NULL,
            FOREIGN KEY (reminder_id) REFERENCES reminders(id) ON DELETE CASCADE,
            FOREIGN KEY (family_id) REFERENCES families(id) ON DELETE CASCADE,
            UNIQUE(reminder_id, family_id)
        );

        -- Schema Version
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        INSERT OR IGNORE INTO schema_version (version) VALUES (1);
        """

    # =========================================================================
    # ROW-TO-MODEL HELPERS
    # =========================================================================

    def _row_to_family(self, row: sqlite3.Row) -> Family:
        return Family(
            id=row["id"],
            name=row["name"],
            phone=row["phone"],
            email=row["email"],
            address=row["address"],
            congregation_id=row["congregation_id"],
            notes=row["notes"],
            photo_url=row["photo_url"],
            created_at=_to_datetime(row["created_at"]),
            updated_at=_to_datetime(row["updated_at"]),
        )

    def _row_to_contact(self, row: sqlite3.Row) -> Contact:
        return Contact(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            phone=row["phone"],
            email=row["email"],
            address=row["address"],
            congregation_id=row["congregation_id"],
            family_id=row["family_id"],
            birthday=_to_date(row["birthday"]),
            wedding_anniversary=_to_date(row["wedding_anniversary"]),
            notes=row["notes"],
            photo_url=row["photo_url"],
            created_at=_to_datetime(row["created_at"]),
            updated_at=_to_datetime(row["updated_at"]),
        )

    def _row_to_interaction(self, row: sqlite3.Row) -> Interaction:
        return Interaction(
            id=row["id"],
            contact_id=row["contact_id"],
            family_id=row["family_id"],
            invite_group_id=row["invite_group_id"],
            type=row["type"],
            notes=row["notes"],
            interaction_date=_to_date(row["interaction_date"]),
            created_at=_to_datetime(row["created_at"]),
        )

    def _row_to_event_template(self, row: sqlite3.Row) -> EventTemplate:
        """Convert a database row to an EventTemplate.

        Raises:
            ValidationError: If the stored recurrence columns are inconsistent
        """
        rule = rule_from_columns(
            row["recurrence_type"],
            row["recurrence_interval"],
            row["recurrence_day_of_week"],
            row["recurrence_day_of_month"],
            row["recurrence_week_of_month"],
        )
        return EventTemplate(
            id=row["id"],
            name=row["name"],
            rule=rule,
            description=row["description"],
            category=row["category"],
            time_of_day=row["time_of_day"],
            max_attendees=row["max_attendees"],
            active=bool(row["active"]),
            created_at=_to_datetime(row["created_at"]),
            updated_at=_to_datetime(row["updated_at"]),
        )

    def _row_to_event_slot(self, row: sqlite3.Row) -> EventSlot:
        keys = row.keys()
        return EventSlot(
            id=row["id"],
            event_template_id=row["event_template_id"],
            slot_date=_to_date(row["slot_date"]),
            slot_time=row["slot_time"],
            status=SlotStatus(row["status"]),
            attendee_count=row["attendee_count"] if "attendee_count" in keys else 0,
            template_name=row["template_name"] if "template_name" in keys else None,
            template_category=row["template_category"] if "template_category" in keys else None,
            created_at=_to_datetime(row["created_at"]),
        )

    def _row_to_reminder(self, row: sqlite3.Row) -> Reminder:
        conn = self._get_connection()
        contact_ids = [
            r["contact_id"]
            for r in conn.execute(
                "SELECT contact_id FROM reminder_contacts WHERE reminder_id = ? ORDER BY contact_id",
                (row["id"],),
            ).fetchall()
        ]
        family_ids = [
            r["family_id"]
            for r in conn.execute(
                "SELECT family_id FROM reminder_families WHERE reminder_id = ? ORDER BY family_id",
                (row["id"],),
            ).fetchall()
        ]
        return Reminder(
            id=row["id"],
            type=ReminderType(row["type"]),
            title=row["title"],
            description=row["description"],
            due_date=_to_date(row["due_date"]),
            repeat=RepeatInterval(row["repeat"]),
            completed=bool(row["completed"]),
            completed_at=_to_datetime(row["completed_at"]),
            contact_ids=contact_ids,
            family_ids=family_ids,
            created_at=_to_datetime(row["created_at"]),
        )

    # =========================================================================
    # CONGREGATION OPERATIONS
    # =========================================================================

    def create_congregation(self, congregation: Congregation) -> int:
        """Create a congregation record."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "INSERT INTO congregations (name, city) VALUES (?, ?)",
                (congregation.name, congregation.city),
            )
            conn.commit()
            return self._lastrowid(cursor)
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create congregation: {e}") from e

    def get_congregations(self) -> list[Congregation]:
        """Get all congregations ordered by name."""
        conn = self._get_connection()
        rows = conn.execute("SELECT * FROM congregations ORDER BY name").fetchall()
        return [
            Congregation(
                id=row["id"],
                name=row["name"],
                city=row["city"],
                created_at=_to_datetime(row["created_at"]),
            )
            for row in rows
        ]

    # =========================================================================
    # FAMILY OPERATIONS
    # =========================================================================

    def create_family(self, family: Family) -> int:
        """Create a family record."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """INSERT INTO families
                   (name, phone, email, address, congregation_id, notes, photo_url)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    family.name,
                    family.phone,
                    family.email,
                    family.address,
                    family.congregation_id,
                    family.notes,
                    family.photo_url,
                ),
            )
            conn.commit()
            family_id = self._lastrowid(cursor)
            logger.info(
                "Family created",
                extra={"context": {"family_id": family_id, "name": family.name}},
            )
            return family_id
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create family: {e}") from e

    def get_family(self, family_id: int) -> Optional[Family]:
        """Get family by ID."""
        conn = self._get_connection()
        row = conn.execute("SELECT * FROM families WHERE id = ?", (family_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_family(row)

    def get_families(self) -> list[Family]:
        """Get all families ordered by name."""
        conn = self._get_connection()
        rows = conn.execute("SELECT * FROM families ORDER BY name").fetchall()
        return [self._row_to_family(row) for row in rows]

    def update_family(self, family: Family) -> bool:
        """Update family. Returns True if updated."""
        if family.id is None:
            return False
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """UPDATE families SET
                   name = ?, phone = ?, email = ?, address = ?,
                   congregation_id = ?, notes = ?, photo_url = ?,
                   updated_at = CURRENT_TIMESTAMP
                   WHERE id = ?""",
                (
                    family.name,
                    family.phone,
                    family.email,
                    family.address,
                    family.congregation_id,
                    family.notes,
                    family.photo_url,
                    family.id,
                ),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to update family: {e}") from e

    def delete_family(self, family_id: int) -> bool:
        """Delete family. Members stay as individuals."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM families WHERE id = ?", (family_id,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to delete family: {e}") from e

    def get_family_members(self, family_id: int) -> list[Contact]:
        """Get contacts belonging to a family."""
        return self.get_contacts(family_id=family_id)

    # =========================================================================
    # CONTACT OPERATIONS
    # =========================================================================

    def create_contact(self, contact: Contact) -> int:
        """Create a contact record."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """INSERT INTO contacts
                   (first_name, last_name, phone, email, address, congregation_id,
                    family_id, birthday, wedding_anniversary, notes, photo_url)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    contact.first_name,
                    contact.last_name,
                    contact.phone,
                    contact.email,
                    contact.address,
                    contact.congregation_id,
                    contact.family_id,
                    _date_str(contact.birthday),
                    _date_str(contact.wedding_anniversary),
                    contact.notes,
                    contact.photo_url,
                ),
            )
            conn.commit()
            contact_id = self._lastrowid(cursor)
            logger.info(
                "Contact created",
                extra={"context": {"contact_id": contact_id, "name": contact.full_name}},
            )
            return contact_id
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create contact: {e}") from e

    def get_contact(self, contact_id: int) -> Optional[Contact]:
        """Get contact by ID."""
        conn = self._get_connection()
        row = conn.execute("SELECT * FROM contacts WHERE id = ?", (contact_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_contact(row)

    def get_contacts(
        self,
        family_id: Optional[int] = None,
        congregation_id: Optional[int] = None,
        search_query: Optional[str] = None,
        limit: int = 500,
    ) -> list[Contact]:
        """Get contacts with optional filtering, ordered by last then first name."""
        conn = self._get_connection()

        conditions: list[str] = []
        params: list[Any] = []

        if family_id is not None:
            conditions.append("family_id = ?")
            params.append(family_id)

        if congregation_id is not None:
            conditions.append("congregation_id = ?")
            params.append(congregation_id)

        if search_query:
            conditions.append("(first_name LIKE ? OR last_name LIKE ? OR email LIKE ?)")
            pattern = f"%{search_query}%"
            params.extend([pattern, pattern, pattern])

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        params.append(limit)
        rows = conn.execute(
            f"SELECT * FROM contacts {where} ORDER BY last_name, first_name LIMIT ?",
            params,
        ).fetchall()
        return [self._row_to_contact(row) for row in rows]

    def get_contacts_with_birthdays(self) -> list[Contact]:
        """Get contacts that have a birthday on record."""
        conn = self._get_connection()
        rows = conn.execute(
            "SELECT * FROM contacts WHERE birthday IS NOT NULL AND birthday != ''"
        ).fetchall()
        return [self._row_to_contact(row) for row in rows]

    def get_people_grouped(self) -> PeopleGrouped:
        """Families (by name) with their members, then contacts without a family.

        Members and individuals are ordered by first then last name.
        """
        conn = self._get_connection()
        rows = conn.execute(
            "SELECT * FROM contacts ORDER BY first_name, last_name"
        ).fetchall()

        # Bucket contacts by family in one pass
        members: dict[int, list[Contact]] = {}
        individuals: list[Contact] = []
        for row in rows:
            contact = self._row_to_contact(row)
            if contact.family_id is None:
                individuals.append(contact)
            else:
                members.setdefault(contact.family_id, []).append(contact)

        families = [
            (family, members.get(family.id, [])) for family in self.get_families() if family.id
        ]
        return PeopleGrouped(families=families, individuals=individuals)

    def update_contact(self, contact: Contact) -> bool:
        """Update contact. Returns True if updated."""
        if contact.id is None:
            return False
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """UPDATE contacts SET
                   first_name = ?, last_name = ?, phone = ?, email = ?, address = ?,
                   congregation_id = ?, family_id = ?, birthday = ?,
                   wedding_anniversary = ?, notes = ?, photo_url = ?,
                   updated_at = CURRENT_TIMESTAMP
                   WHERE id = ?""",
                (
                    contact.first_name,
                    contact.last_name,
                    contact.phone,
                    contact.email,
                    contact.address,
                    contact.congregation_id,
                    contact.family_id,
                    _date_str(contact.birthday),
                    _date_str(contact.wedding_anniversary),
                    contact.notes,
                    contact.photo_url,
                    contact.id,
                ),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to update contact: {e}") from e

    def delete_contact(self, contact_id: int) -> bool:
        """Delete contact and everything hanging off it."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM contacts WHERE id = ?", (contact_id,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to delete contact: {e}") from e

    # =========================================================================
    # TAG OPERATIONS
    # =========================================================================

    def create_tag(self, tag: Tag) -> int:
        """Create a tag. Tag names are unique."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "INSERT INTO tags (name, color) VALUES (?, ?)", (tag.name, tag.color)
            )
            conn.commit()
            return self._lastrowid(cursor)
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create tag: {e}") from e

    def get_tags(self) -> list[Tag]:
        """Get all tags ordered by name."""
        conn = self._get_connection()
        rows = conn.execute("SELECT * FROM tags ORDER BY name").fetchall()
        return [self._row_to_tag(row) for row in rows]

    def update_tag(self, tag: Tag) -> bool:
        """Rename or recolor a tag. Returns True if updated.

        Raises:
            ValidationError: If the name is empty or the color is not #RRGGBB
            DatabaseError: If the name is taken by another tag
        """
        if tag.id is None:
            return False
        if not tag.name or not tag.name.strip():
            raise ValidationError("Tag name is required")
        if not re.match(TAG_COLOR_PATTERN, tag.color or ""):
            raise ValidationError(f"Tag color must look like #RRGGBB, got {tag.color!r}")

        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "UPDATE tags SET name = ?, color = ? WHERE id = ?",
                (tag.name, tag.color, tag.id),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to update tag: {e}") from e

    def _row_to_tag(self, row: sqlite3.Row) -> Tag:
        return Tag(
            id=row["id"],
            name=row["name"],
            color=row["color"],
            created_at=_to_datetime(row["created_at"]),
        )

    def delete_tag(self, tag_id: int) -> bool:
        """Delete tag and detach it everywhere."""
        conn = self._get_connection()
        cursor = conn.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
        conn.commit()
        return cursor.rowcount > 0

    def add_tag_to_contact(self, contact_id: int, tag_id: int) -> bool:
        """Attach tag to contact. Returns True if newly attached."""
        return self._link("contact_tags", "contact_id", contact_id, tag_id)

    def remove_tag_from_contact(self, contact_id: int, tag_id: int) -> bool:
        """Detach tag from contact."""
        return self._unlink("contact_tags", "contact_id", contact_id, tag_id)

    def get_contact_tags(self, contact_id: int) -> list[Tag]:
        """Get tags attached to a contact."""
        conn = self._get_connection()
        rows = conn.execute(
            """SELECT t.* FROM tags t
               JOIN contact_tags ct ON ct.tag_id = t.id
               WHERE ct.contact_id = ? ORDER BY t.name""",
            (contact_id,),
        ).fetchall()
        return [self._row_to_tag(row) for row in rows]

    def add_tag_to_family(self, family_id: int, tag_id: int) -> bool:
        """Attach tag to family. Returns True if newly attached."""
        return self._link("family_tags", "family_id", family_id, tag_id)

    def remove_tag_from_family(self, family_id: int, tag_id: int) -> bool:
        """Detach tag from family."""
        return self._unlink("family_tags", "family_id", family_id, tag_id)

    def get_family_tags(self, family_id: int) -> list[Tag]:
        """Get tags attached to a family."""
        conn = self._get_connection()
        rows = conn.execute(
            """SELECT t.* FROM tags t
               JOIN family_tags ft ON ft.tag_id = t.id
               WHERE ft.family_id = ? ORDER BY t.name""",
            (family_id,),
        ).fetchall()
        return [self._row_to_tag(row) for row in rows]

    def _link(self, table: str, owner_column: str, owner_id: int, tag_id: int) -> bool:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                f"INSERT OR IGNORE INTO {table} ({owner_column}, tag_id) VALUES (?, ?)",
                (owner_id, tag_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to attach tag: {e}") from e

    def _unlink(self, table: str, owner_column: str, owner_id: int, tag_id: int) -> bool:
        conn = self._get_connection()
        cursor = conn.execute(
            f"DELETE FROM {table} WHERE {owner_column} = ? AND tag_id = ?",
            (owner_id, tag_id),
        )
        conn.commit()
        return cursor.rowcount > 0

    # =========================================================================
    # INVITE GROUP OPERATIONS
    # =========================================================================

    def create_invite_group(self, group: InviteGroup) -> int:
        """Create an invite group together with its members."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "INSERT INTO invite_groups (name, family_id, notes) VALUES (?, ?, ?)",
                (group.name, group.family_id, group.notes),
            )
            group_id = self._lastrowid(cursor)
            self._replace_members(conn, group_id, group.member_ids)
            conn.commit()
            logger.info(
                "Invite group created",
                extra={
                    "context": {"invite_group_id": group_id, "members": len(group.member_ids)}
                },
            )
            return group_id
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create invite group: {e}") from e

    def _replace_members(
        self, conn: sqlite3.Connection, group_id: int, member_ids: Iterable[int]
    ) -> None:
        conn.execute("DELETE FROM invite_group_members WHERE invite_group_id = ?", (group_id,))
        conn.executemany(
            "INSERT OR IGNORE INTO invite_group_members (invite_group_id, contact_id) VALUES (?, ?)",
            [(group_id, contact_id) for contact_id in member_ids],
        )

    def _row_to_invite_group(self, row: sqlite3.Row) -> InviteGroup:
        conn = self._get_connection()
        members = conn.execute(
            "SELECT contact_id FROM invite_group_members WHERE invite_group_id = ? ORDER BY contact_id",
            (row["id"],),
        ).fetchall()
        return InviteGroup(
            id=row["id"],
            name=row["name"],
            family_id=row["family_id"],
            notes=row["notes"],
            member_ids=[m["contact_id"] for m in members],
            created_at=_to_datetime(row["created_at"]),
            updated_at=_to_datetime(row["updated_at"]),
        )

    def get_invite_group(self, group_id: int) -> Optional[InviteGroup]:
        """Get invite group (with member IDs) by ID."""
        conn = self._get_connection()
        row = conn.execute("SELECT * FROM invite_groups WHERE id = ?", (group_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_invite_group(row)

    def get_invite_groups(self, family_id: Optional[int] = None) -> list[InviteGroup]:
        """Get invite groups ordered by name, optionally for one family."""
        conn = self._get_connection()
        if family_id is None:
            rows = conn.execute("SELECT * FROM invite_groups ORDER BY name").fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM invite_groups WHERE family_id = ? ORDER BY name", (family_id,)
            ).fetchall()
        return [self._row_to_invite_group(row) for row in rows]

    def update_invite_group(self, group: InviteGroup) -> bool:
        """Update invite group fields and replace its member set."""
        if group.id is None:
            return False
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """UPDATE invite_groups SET
                   name = ?, family_id = ?, notes = ?, updated_at = CURRENT_TIMESTAMP
                   WHERE id = ?""",
                (group.name, group.family_id, group.notes, group.id),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                return False
            self._replace_members(conn, group.id, group.member_ids)
            conn.commit()
            return True
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to update invite group: {e}") from e

    def delete_invite_group(self, group_id: int) -> bool:
        """Delete invite group, its memberships and its interactions."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM invite_groups WHERE id = ?", (group_id,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to delete invite group: {e}") from e

    # =========================================================================
    # INTERACTION OPERATIONS
    # =========================================================================

    @staticmethod
    def _validate_interaction_type(interaction_type: str) -> None:
        if not interaction_type or not interaction_type.strip():
            raise ValidationError("Interaction type is required")
        if len(interaction_type) > MAX_INTERACTION_TYPE_LENGTH:
            raise ValidationError(
                f"Interaction type longer than {MAX_INTERACTION_TYPE_LENGTH} characters"
            )

    def create_interaction(self, interaction: Interaction) -> int:
        """Log an interaction.

        Raises:
            ValidationError: If type is empty/too long or no date is given
            DatabaseError: If the insert fails
        """
        self._validate_interaction_type(interaction.type)
        if interaction.interaction_date is None:
            raise ValidationError("Interaction date is required")

        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """INSERT INTO interactions
                   (contact_id, family_id, invite_group_id, type, notes, interaction_date)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    interaction.contact_id,
                    interaction.family_id,
                    interaction.invite_group_id,
                    interaction.type,
                    interaction.notes,
                    _date_str(interaction.interaction_date),
                ),
            )
            conn.commit()
            interaction_id = self._lastrowid(cursor)
            logger.info(
                "Interaction logged",
                extra={
                    "context": {
                        "interaction_id": interaction_id,
                        "type": interaction.type,
                        "contact_id": interaction.contact_id,
                        "family_id": interaction.family_id,
                        "invite_group_id": interaction.invite_group_id,
                    }
                },
            )
            return interaction_id
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create interaction: {e}") from e

    def create_bulk_interaction(
        self,
        invite_group_ids: list[int],
        interaction_type: str,
        interaction_date: date,
        notes: Optional[str] = None,
    ) -> int:
        """Log the same interaction for several invite groups at once.

        Returns:
            Number of interactions created
        """
        self._validate_interaction_type(interaction_type)
        conn = self._get_connection()
        try:
            conn.executemany(
                """INSERT INTO interactions (invite_group_id, type, notes, interaction_date)
                   VALUES (?, ?, ?, ?)""",
                [
                    (group_id, interaction_type, notes, _date_str(interaction_date))
                    for group_id in invite_group_ids
                ],
            )
            conn.commit()
            return len(invite_group_ids)
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create bulk interaction: {e}") from e

    def get_interactions(
        self,
        contact_id: Optional[int] = None,
        family_id: Optional[int] = None,
        invite_group_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Interaction]:
        """Get interactions for one subject, newest first.

        With no subject given, all interactions are returned.
        """
        conn = self._get_connection()

        conditions: list[str] = []
        params: list[Any] = []
        if contact_id is not None:
            conditions.append("contact_id = ?")
            params.append(contact_id)
        if family_id is not None:
            conditions.append("family_id = ?")
            params.append(family_id)
        if invite_group_id is not None:
            conditions.append("invite_group_id = ?")
            params.append(invite_group_id)

        sql = "SELECT * FROM interactions"
        if conditions:
            sql += f" WHERE {' AND '.join(conditions)}"
        sql += " ORDER BY interaction_date DESC, id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_interaction(row) for row in rows]

    def get_interaction_types(self, include_suggested: bool = False) -> list[str]:
        """Distinct interaction types in use, sorted.

        Args:
            include_suggested: Also list the well-known InteractionType values
                that have not been used yet (for pick lists)
        """
        conn = self._get_connection()
        rows = conn.execute("SELECT DISTINCT type FROM interactions ORDER BY type").fetchall()
        types = {row["type"] for row in rows}
        if include_suggested:
            types.update(t.value for t in InteractionType)
        return sorted(types)

    def delete_interaction(self, interaction_id: int) -> bool:
        """Delete an interaction."""
        conn = self._get_connection()
        cursor = conn.execute("DELETE FROM interactions WHERE id = ?", (interaction_id,))
        conn.commit()
        return cursor.rowcount > 0

    # =========================================================================
    # EVENT TEMPLATE OPERATIONS
    # =========================================================================

    def create_event_template(self, template: EventTemplate) -> int:
        """Create an event template record (no slots)."""
        conn = self._get_connection()
        columns = rule_to_columns(template.rule)
        try:
            cursor = conn.execute(
                """INSERT INTO event_templates
                   (name, description, category, recurrence_type, recurrence_interval,
                    recurrence_day_of_week, recurrence_day_of_month, recurrence_week_of_month,
                    time_of_day, max_attendees, active)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    template.name,
                    template.description,
                    template.category,
                    columns["recurrence_type"],
                    columns["recurrence_interval"],
                    columns["recurrence_day_of_week"],
                    columns["recurrence_day_of_month"],
                    columns["recurrence_week_of_month"],
                    template.time_of_day,
                    template.max_attendees,
                    template.active,
                ),
            )
            conn.commit()
            return self._lastrowid(cursor)
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create event template: {e}") from e

    def get_event_template(self, template_id: int) -> Optional[EventTemplate]:
        """Get event template by ID."""
        conn = self._get_connection()
        row = conn.execute(
            "SELECT * FROM event_templates WHERE id = ?", (template_id,)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_event_template(row)

    def get_event_templates(self, active_only: bool = False) -> list[EventTemplate]:
        """Get templates, active ones first, then by name."""
        conn = self._get_connection()
        sql = "SELECT * FROM event_templates"
        if active_only:
            sql += " WHERE active = 1"
        sql += " ORDER BY active DESC, name ASC"
        rows = conn.execute(sql).fetchall()
        return [self._row_to_event_template(row) for row in rows]

    def update_event_template(self, template: EventTemplate) -> bool:
        """Update template. Existing slots are left as they are."""
        if template.id is None:
            return False
        conn = self._get_connection()
        columns = rule_to_columns(template.rule)
        try:
            cursor = conn.execute(
                """UPDATE event_templates SET
                   name = ?, description = ?, category = ?,
                   recurrence_type = ?, recurrence_interval = ?,
                   recurrence_day_of_week = ?, recurrence_day_of_month = ?,
                   recurrence_week_of_month = ?,
                   time_of_day = ?, max_attendees = ?, active = ?,
                   updated_at = CURRENT_TIMESTAMP
                   WHERE id = ?""",
                (
                    template.name,
                    template.description,
                    template.category,
                    columns["recurrence_type"],
                    columns["recurrence_interval"],
                    columns["recurrence_day_of_week"],
                    columns["recurrence_day_of_month"],
                    columns["recurrence_week_of_month"],
                    template.time_of_day,
                    template.max_attendees,
                    template.active,
                    template.id,
                ),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to update event template: {e}") from e

    def delete_event_template(self, template_id: int) -> bool:
        """Delete template; its slots go with it."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM event_templates WHERE id = ?", (template_id,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to delete event template: {e}") from e

    # =========================================================================
    # EVENT SLOT OPERATIONS
    # =========================================================================

    def create_event_slot(self, slot: EventSlot) -> Optional[int]:
        """Insert a slot unless one already exists for that template and date.

        The UNIQUE(event_template_id, slot_date) constraint makes this safe
        when two generation runs race for the same date.

        Returns:
            New slot ID, or None if the slot already existed

        Raises:
            DatabaseError: On any failure other than the duplicate date
        """
        conn = self._get_connection()
        status = slot.status.value if isinstance(slot.status, SlotStatus) else slot.status
        try:
            cursor = conn.execute(
                """INSERT INTO event_slots (event_template_id, slot_date, slot_time, status)
                   VALUES (?, ?, ?, ?)""",
                (slot.event_template_id, _date_str(slot.slot_date), slot.slot_time, status),
            )
            conn.commit()
            return self._lastrowid(cursor)
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if _is_slot_conflict(e):
                return None
            raise DatabaseError(f"Failed to create event slot: {e}") from e
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create event slot: {e}") from e

    _SLOT_SELECT = """
        SELECT s.*, t.name AS template_name, t.category AS template_category,
               (SELECT COUNT(*) FROM event_slot_attendees a
                WHERE a.event_slot_id = s.id) AS attendee_count
        FROM event_slots s
        JOIN event_templates t ON t.id = s.event_template_id
    """

    def get_event_slot(self, slot_id: int) -> Optional[EventSlot]:
        """Get slot by ID."""
        conn = self._get_connection()
        row = conn.execute(self._SLOT_SELECT + " WHERE s.id = ?", (slot_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_event_slot(row)

    def get_event_slots(self, template_id: int) -> list[EventSlot]:
        """Get all slots of a template in date order."""
        conn = self._get_connection()
        rows = conn.execute(
            self._SLOT_SELECT + " WHERE s.event_template_id = ? ORDER BY s.slot_date ASC",
            (template_id,),
        ).fetchall()
        return [self._row_to_event_slot(row) for row in rows]

    def get_upcoming_slots(self, today: date, limit: int = 20) -> list[EventSlot]:
        """Get slots on or after today for active templates, soonest first."""
        conn = self._get_connection()
        rows = conn.execute(
            self._SLOT_SELECT
            + """ WHERE s.slot_date >= ? AND t.active = 1
                  ORDER BY s.slot_date ASC, s.slot_time ASC
                  LIMIT ?""",
            (_date_str(today), limit),
        ).fetchall()
        return [self._row_to_event_slot(row) for row in rows]

    def update_slot_status(self, slot_id: int, status: SlotStatus) -> bool:
        """Set slot status (e.g. completed or cancelled)."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "UPDATE event_slots SET status = ? WHERE id = ?", (status.value, slot_id)
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to update slot status: {e}") from e

    def assign_to_slot(
        self,
        slot_id: int,
        contact_ids: Optional[list[int]] = None,
        family_ids: Optional[list[int]] = None,
    ) -> bool:
        """Replace the attendees of a slot.

        The slot becomes ASSIGNED when anyone is attached and falls back to
        AVAILABLE when the list is cleared. COMPLETED and CANCELLED slots keep
        their status.

        Returns:
            False if the slot does not exist
        """
        slot = self.get_event_slot(slot_id)
        if slot is None:
            return False

        contact_ids = contact_ids or []
        family_ids = family_ids or []
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM event_slot_attendees WHERE event_slot_id = ?", (slot_id,))
            conn.executemany(
                """INSERT INTO event_slot_attendees (event_slot_id, contact_id, response)
                   VALUES (?, ?, ?)""",
                [(slot_id, cid, AttendeeResponse.PENDING.value) for cid in contact_ids],
            )
            conn.executemany(
                """INSERT INTO event_slot_attendees (event_slot_id, family_id, response)
                   VALUES (?, ?, ?)""",
                [(slot_id, fid, AttendeeResponse.PENDING.value) for fid in family_ids],
            )
            if slot.status not in TERMINAL_SLOT_STATUSES:
                new_status = (
                    SlotStatus.ASSIGNED if contact_ids or family_ids else SlotStatus.AVAILABLE
                )
                conn.execute(
                    "UPDATE event_slots SET status = ? WHERE id = ?", (new_status.value, slot_id)
                )
            conn.commit()
            return True
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to assign to slot: {e}") from e

    def get_slot_attendees(self, slot_id: int) -> list[dict[str, Any]]:
        """Get attendee rows (contact_id, family_id, response) of a slot."""
        conn = self._get_connection()
        rows = conn.execute(
            """SELECT contact_id, family_id, response FROM event_slot_attendees
               WHERE event_slot_id = ? ORDER BY id""",
            (slot_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    def assign_invite_groups_to_slot(self, slot_id: int, group_ids: list[int]) -> None:
        """Replace the invite groups attached to a slot."""
        conn = self._get_connection()
        try:
            conn.execute(
                "DELETE FROM event_slot_invite_groups WHERE event_slot_id = ?", (slot_id,)
            )
            conn.executemany(
                """INSERT OR IGNORE INTO event_slot_invite_groups (event_slot_id, invite_group_id)
                   VALUES (?, ?)""",
                [(slot_id, gid) for gid in group_ids],
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to assign invite groups to slot: {e}") from e

    def get_slot_invite_groups(self, slot_id: int) -> list[int]:
        """Get invite group IDs attached to a slot."""
        conn = self._get_connection()
        rows = conn.execute(
            """SELECT invite_group_id FROM event_slot_invite_groups
               WHERE event_slot_id = ? ORDER BY invite_group_id""",
            (slot_id,),
        ).fetchall()
        return [row["invite_group_id"] for row in rows]

    # =========================================================================
    # REMINDER OPERATIONS
    # =========================================================================

    def create_reminder(self, reminder: Reminder) -> int:
        """Create a reminder and link its contacts and families."""
        if reminder.due_date is None:
            raise ValidationError("Reminder due date is required")
        if not reminder.title:
            raise ValidationError("Reminder title is required")

        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """INSERT INTO reminders (type, title, description, due_date, repeat, completed)
                   VALUES (?, ?, ?, ?, ?, 0)""",
                (
                    reminder.type.value,
                    reminder.title,
                    reminder.description,
                    _date_str(reminder.due_date),
                    reminder.repeat.value,
                ),
            )
            reminder_id = self._lastrowid(cursor)
            self._replace_reminder_links(conn, reminder_id, reminder)
            conn.commit()
            return reminder_id
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to create reminder: {e}") from e

    def _replace_reminder_links(
        self, conn: sqlite3.Connection, reminder_id: int, reminder: Reminder
    ) -> None:
        conn.execute("DELETE FROM reminder_contacts WHERE reminder_id = ?", (reminder_id,))
        conn.execute("DELETE FROM reminder_families WHERE reminder_id = ?", (reminder_id,))
        conn.executemany(
            "INSERT OR IGNORE INTO reminder_contacts (reminder_id, contact_id) VALUES (?, ?)",
            [(reminder_id, cid) for cid in reminder.contact_ids],
        )
        conn.executemany(
            "INSERT OR IGNORE INTO reminder_families (reminder_id, family_id) VALUES (?, ?)",
            [(reminder_id, fid) for fid in reminder.family_ids],
        )

    def get_reminder(self, reminder_id: int) -> Optional[Reminder]:
        """Get reminder by ID."""
        conn = self._get_connection()
        row = conn.execute("SELECT * FROM reminders WHERE id = ?", (reminder_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_reminder(row)

    def get_reminders(self, include_completed: bool = True) -> list[Reminder]:
        """Get reminders ordered by due date."""
        conn = self._get_connection()
        sql = "SELECT * FROM reminders"
        if not include_completed:
            sql += " WHERE completed = 0"
        sql += " ORDER BY due_date ASC, created_at DESC"
        rows = conn.execute(sql).fetchall()
        return [self._row_to_reminder(row) for row in rows]

    def update_reminder(self, reminder: Reminder) -> bool:
        """Update reminder fields, completion state and links."""
        if reminder.id is None:
            return False
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """UPDATE reminders SET
                   type = ?, title = ?, description = ?, due_date = ?, repeat = ?,
                   completed = ?, completed_at = ?
                   WHERE id = ?""",
                (
                    reminder.type.value,
                    reminder.title,
                    reminder.description,
                    _date_str(reminder.due_date),
                    reminder.repeat.value,
                    reminder.completed,
                    reminder.completed_at.isoformat(sep=" ") if reminder.completed_at else None,
                    reminder.id,
                ),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                return False
            self._replace_reminder_links(conn, reminder.id, reminder)
            conn.commit()
            return True
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Failed to update reminder: {e}") from e

    def delete_reminder(self, reminder_id: int) -> bool:
        """Delete reminder."""
        conn = self._get_connection()
        cursor = conn.execute("DELETE FROM reminders WHERE id = ?", (reminder_id,))
        conn.commit()
        return cursor.rowcount > 0

    def get_overdue_reminders(self, today: date, limit: int = 5) -> list[Reminder]:
        """Open reminders due before today, oldest first."""
        conn = self._get_connection()
        rows = conn.execute(
            """SELECT * FROM reminders
               WHERE completed = 0 AND due_date < ?
               ORDER BY due_date ASC LIMIT ?""",
            (_date_str(today), limit),
        ).fetchall()
        return [self._row_to_reminder(row) for row in rows]

    def get_upcoming_reminders(self, today: date, until: date) -> list[Reminder]:
        """Open reminders due between today and until (inclusive)."""
        conn = self._get_connection()
        rows = conn.execute(
            """SELECT * FROM reminders
               WHERE completed = 0 AND due_date >= ? AND due_date <= ?
               ORDER BY due_date ASC""",
            (_date_str(today), _date_str(until)),
        ).fetchall()
        return [self._row_to_reminder(row) for row in rows]

    def get_reminders_for_month(self, year: int, month: int) -> list[Reminder]:
        """Open reminders due in one calendar month, for the calendar view.

        Raises:
            ValidationError: If month is not 1-12
        """
        if not 1 <= month <= 12:
            raise ValidationError(f"month must be 1-12, got {month}")

        first = date(year, month, 1)
        next_month = first + relativedelta(months=1)
        conn = self._get_connection()
        rows = conn.execute(
            """SELECT * FROM reminders
               WHERE completed = 0 AND due_date >= ? AND due_date < ?
               ORDER BY due_date ASC""",
            (_date_str(first), _date_str(next_month)),
        ).fetchall()
        return [self._row_to_reminder(row) for row in rows]

    # =========================================================================
    # COUNTS AND RAW ROWS
    # =========================================================================

    def get_counts(self, today: date) -> dict[str, int]:
        """Row counts shown on the dashboard."""
        conn = self._get_connection()
        day = _date_str(today)

        def scalar(sql: str, params: tuple = ()) -> int:
            return int(conn.execute(sql, params).fetchone()[0])

        return {
            "contacts": scalar("SELECT COUNT(*) FROM contacts"),
            "families": scalar("SELECT COUNT(*) FROM families"),
            "reminders": scalar("SELECT COUNT(*) FROM reminders WHERE completed = 0"),
            "overdue": scalar(
                "SELECT COUNT(*) FROM reminders WHERE completed = 0 AND due_date < ?", (day,)
            ),
            "upcoming_events": scalar(
                """SELECT COUNT(*) FROM event_slots s
                   JOIN event_templates t ON t.id = s.event_template_id
                   WHERE s.slot_date >= ? AND t.active = 1""",
                (day,),
            ),
        }

    def get_table_rows(self, table: str) -> list[dict[str, Any]]:
        """Dump every row of an exportable table as plain dicts.

        Raises:
            DatabaseError: If the table is not exportable
        """
        if table not in EXPORTABLE_TABLES:
            raise DatabaseError(f"Table cannot be exported: {table}")
        conn = self._get_connection()
        rows = conn.execute(f"SELECT * FROM {table}").fetchall()
        return [dict(row) for row in rows]
