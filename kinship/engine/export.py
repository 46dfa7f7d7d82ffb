"""Full data export.

Provides:
    - Snapshot of every collection as a JSON-ready dict
    - JSON file export
    - Excel workbook export (one sheet per collection)

Usage:
    from kinship.engine.export import export_all_data, write_export_json

    snapshot = export_all_data(db)
    write_export_json(db, Path("kinship-export.json"))
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import openpyxl

from kinship.core.exceptions import ExportError
from kinship.core.logging import get_logger
from kinship.db.database import Database

logger = get_logger(__name__)

EXPORT_VERSION = "1.0"

# Collection name in the export -> source table
COLLECTIONS: dict[str, str] = {
    "congregations": "congregations",
    "contacts": "contacts",
    "families": "families",
    "tags": "tags",
    "reminders": "reminders",
    "interactions": "interactions",
    "inviteGroups": "invite_groups",
    "eventTemplates": "event_templates",
    "eventSlots": "event_slots",
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_row(row: dict[str, Any]) -> dict[str, Any]:
    return {_camel(key): value for key, value in row.items()}


def _group_by(rows: list[dict[str, Any]], key: str) -> dict[int, list[dict[str, Any]]]:
    grouped: dict[int, list[dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(row[key], []).append(row)
    return grouped


def export_all_data(db: Database, now: Optional[datetime] = None) -> dict[str, Any]:
    """Snapshot every collection.

    Contacts carry their tag links, reminders their contact and family links,
    invite groups their members and event slots their attendees.

    Args:
        db: Database instance
        now: Export timestamp (defaults to now)

    Returns:
        {"version", "exportDate", "data": {collection: [rows]}}
    """
    if now is None:
        now = datetime.now()

    data: dict[str, list[dict[str, Any]]] = {
        name: [_camel_row(row) for row in db.get_table_rows(table)]
        for name, table in COLLECTIONS.items()
    }

    nested = [
        ("contacts", "contact_tags", "contact_id", "tags"),
        ("reminders", "reminder_contacts", "reminder_id", "contacts"),
        ("reminders", "reminder_families", "reminder_id", "families"),
        ("inviteGroups", "invite_group_members", "invite_group_id", "members"),
        ("eventSlots", "event_slot_attendees", "event_slot_id", "attendees"),
    ]
    for collection, link_table, owner_key, field_name in nested:
        links = _group_by(db.get_table_rows(link_table), owner_key)
        for record in data[collection]:
            record[field_name] = [_camel_row(row) for row in links.get(record["id"], [])]

    logger.info(
        "Data exported",
        extra={"context": {name: len(rows) for name, rows in data.items()}},
    )
    return {
        "version": EXPORT_VERSION,
        "exportDate": now.isoformat(),
        "data": data,
    }


def write_export_json(db: Database, path: Path, now: Optional[datetime] = None) -> Path:
    """Write the full snapshot as a JSON file.

    Raises:
        ExportError: If the file cannot be written
    """
    snapshot = export_all_data(db, now=now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2, default=str)
    except OSError as e:
        raise ExportError(f"Cannot write export file {path}: {e}") from e

    logger.info("Export written", extra={"context": {"path": str(path), "format": "json"}})
    return path


def _cell(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value, default=str)
    return value


def write_export_workbook(db: Database, path: Path, now: Optional[datetime] = None) -> Path:
    """Write the full snapshot as an .xlsx workbook, one sheet per collection.

    Nested link lists are stored as JSON text in their cell.

    Raises:
        ExportError: If the workbook cannot be saved
    """
    snapshot = export_all_data(db, now=now)

    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in snapshot["data"].items():
        ws = wb.create_sheet(title=name)
        if not rows:
            continue
        headers = list(rows[0].keys())
        ws.append(headers)
        for row in rows:
            ws.append([_cell(row.get(h)) for h in headers])

    info = wb.create_sheet(title="export")
    info.append(["version", snapshot["version"]])
    info.append(["exportDate", snapshot["exportDate"]])

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(str(path))
    except OSError as e:
        raise ExportError(f"Cannot write workbook {path}: {e}") from e

    logger.info("Export written", extra={"context": {"path": str(path), "format": "xlsx"}})
    return path
