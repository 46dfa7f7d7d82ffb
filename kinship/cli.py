"""Kinship - personal relationship manager.

Command line entry point.

Usage:
    kinship --status                      # Show counts and config issues
    kinship --generate-slots 3 --months 6 # Top up slots for template 3
    kinship --generate-all                # Top up slots for every active template
    kinship --upcoming                    # List upcoming event slots
    kinship --score-contact 12            # Relationship score of a contact
    kinship --export backup.json          # Export everything (.json or .xlsx)
    kinship --version                     # Show version
"""

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from kinship import __version__
from kinship.core.config import get_config, validate_config
from kinship.core.exceptions import ConfigurationError, KinshipError
from kinship.core.logging import get_logger, setup_logging
from kinship.db.database import Database
from kinship.engine.dashboard import get_stats, get_upcoming_birthdays
from kinship.engine.export import write_export_json, write_export_workbook
from kinship.engine.recurrence import generate_all_slots, generate_slots
from kinship.engine.scoring import (
    RelationshipScore,
    get_contact_score,
    get_family_score,
    get_invite_group_score,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kinship", description="Kinship - personal relationship manager"
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--status", action="store_true", help="Show dashboard counts and exit")
    parser.add_argument(
        "--generate-slots",
        type=int,
        metavar="TEMPLATE_ID",
        help="Generate missing slots for one event template",
    )
    parser.add_argument(
        "--months", type=int, default=None, help="Months ahead to generate (default from config)"
    )
    parser.add_argument(
        "--generate-all", action="store_true", help="Generate slots for every active template"
    )
    parser.add_argument("--upcoming", action="store_true", help="List upcoming event slots")

    score = parser.add_mutually_exclusive_group()
    score.add_argument("--score-contact", type=int, metavar="ID", help="Score a contact")
    score.add_argument("--score-family", type=int, metavar="ID", help="Score a family")
    score.add_argument("--score-group", type=int, metavar="ID", help="Score an invite group")

    parser.add_argument(
        "--export", type=Path, metavar="PATH", help="Export all data to PATH (.json or .xlsx)"
    )
    return parser


def _print_score(subject: str, score: RelationshipScore) -> None:
    print(f"{subject}: {score.score}/100 ({score.label})")
    print(f"  recency {score.recency}, frequency {score.frequency}, variety {score.variety}")
    if score.last_interaction_days is not None:
        print(f"  last interaction {score.last_interaction_days} day(s) ago")
    elif score.has_history:
        print("  no interactions in the last six months")
    print(f"  interactions in window: {score.total_interactions}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for Kinship.

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    args = _build_parser().parse_args(argv)

    if args.version:
        print(f"Kinship v{__version__}")
        return 0

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    debug = args.debug or config.debug
    setup_logging(log_dir=config.log_path, debug=debug)
    logger = get_logger("main")

    issues = validate_config(config)
    if issues:
        for issue in issues:
            logger.error(f"Configuration issue: {issue}")
            print(f"  ! {issue}", file=sys.stderr)
        return 1

    months = args.months if args.months is not None else config.slot_months_ahead

    db = Database(str(config.db_path))
    try:
        db.initialize()

        if args.generate_slots is not None:
            created = generate_slots(db, args.generate_slots, months=months)
            print(f"Template {args.generate_slots}: {created} slot(s) created")

        if args.generate_all:
            results = generate_all_slots(db, months=months)
            total = sum(results.values())
            print(f"{len(results)} template(s), {total} slot(s) created")

        if args.upcoming:
            slots = db.get_upcoming_slots(today=date.today(), limit=config.upcoming_limit)
            if not slots:
                print("No upcoming events")
            for slot in slots:
                time = f" {slot.slot_time}" if slot.slot_time else ""
                print(
                    f"{slot.slot_date}{time}  {slot.template_name}  "
                    f"[{slot.status.value}, {slot.attendee_count} attending]"
                )

        if args.score_contact is not None:
            _print_score(f"Contact {args.score_contact}", get_contact_score(db, args.score_contact))
        if args.score_family is not None:
            _print_score(f"Family {args.score_family}", get_family_score(db, args.score_family))
        if args.score_group is not None:
            _print_score(
                f"Invite group {args.score_group}", get_invite_group_score(db, args.score_group)
            )

        if args.export is not None:
            if args.export.suffix.lower() == ".xlsx":
                path = write_export_workbook(db, args.export)
            else:
                path = write_export_json(db, args.export)
            print(f"Exported to {path}")

        if args.status:
            stats = get_stats(db)
            print(f"\nKinship v{__version__}\n")
            print(f"  Contacts:         {stats.contacts}")
            print(f"  Families:         {stats.families}")
            print(f"  Open reminders:   {stats.reminders}")
            print(f"  Overdue:          {stats.overdue}")
            print(f"  Upcoming events:  {stats.upcoming_events}")
            birthdays = get_upcoming_birthdays(db, days=config.birthday_window_days)
            for birthday in birthdays:
                print(
                    f"  Birthday: {birthday.first_name} {birthday.last_name} "
                    f"in {birthday.days_until} day(s)"
                )
            print()

    except KinshipError as e:
        logger.error(f"Command failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
