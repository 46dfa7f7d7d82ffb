"""Shared pytest fixtures for Kinship tests.

Fixtures:
    - temp_db: Fresh file-backed SQLite database
    - memory_db: Fresh in-memory SQLite database
    - today: Fixed reference date
    - sample_family / sample_contact: Sample records
    - weekly_template: Weekly event template
    - mock_config: Test configuration
    - populated_db: Database with a family, contacts, a group and interactions
"""

from datetime import date, timedelta
from pathlib import Path
from typing import Generator

import pytest

from kinship.core.config import Config, reset_config
from kinship.db.database import Database
from kinship.db.models import (
    Contact,
    EventTemplate,
    Family,
    Interaction,
    InviteGroup,
    WeeklyRule,
)

# Wednesday
TODAY = date(2026, 4, 15)


@pytest.fixture(autouse=True)
def _reset_config_singleton():
    """Never leak a cached config between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_db(tmp_path: Path) -> Generator[Database, None, None]:
    """Create a temporary database for testing.

    Yields:
        Database connected to temp file, cleaned up after test
    """
    db_path = tmp_path / "test.db"
    db = Database(str(db_path))
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def memory_db() -> Generator[Database, None, None]:
    """Create an in-memory database for fast tests.

    Yields:
        Database using :memory:, no cleanup needed
    """
    db = Database(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def today() -> date:
    """Fixed reference date (Wednesday 2026-04-15)."""
    return TODAY


@pytest.fixture
def sample_family() -> Family:
    """Sample Family record for testing."""
    return Family(name="Berg", phone="555-0100", email="berg@example.com")


@pytest.fixture
def sample_contact() -> Contact:
    """Sample Contact record for testing."""
    return Contact(
        first_name="Anna",
        last_name="Berg",
        email="anna@example.com",
        birthday=date(1985, 4, 20),
    )


@pytest.fixture
def weekly_template() -> EventTemplate:
    """Every other Wednesday at 19:00."""
    return EventTemplate(
        name="Bible study",
        category="study",
        rule=WeeklyRule(day_of_week=3, interval=2),
        time_of_day="19:00",
    )


@pytest.fixture
def mock_config(tmp_path: Path) -> Config:
    """Test configuration with temp paths."""
    return Config(
        db_path=tmp_path / "test.db",
        log_path=tmp_path / "logs",
        export_path=tmp_path / "exports",
        debug=True,
    )


@pytest.fixture
def populated_db(
    memory_db: Database, sample_family: Family, sample_contact: Contact
) -> Database:
    """Database pre-populated with sample data.

    Contains:
        - 1 family (Berg)
        - 2 contacts in that family (Anna, Jonas)
        - 1 invite group with both contacts
        - 2 interactions for Anna (call 3 days ago, visit 40 days ago)
    """
    family_id = memory_db.create_family(sample_family)

    sample_contact.family_id = family_id
    anna_id = memory_db.create_contact(sample_contact)
    jonas_id = memory_db.create_contact(
        Contact(first_name="Jonas", last_name="Berg", family_id=family_id)
    )

    memory_db.create_invite_group(
        InviteGroup(name="Berg household", family_id=family_id, member_ids=[anna_id, jonas_id])
    )

    memory_db.create_interaction(
        Interaction(contact_id=anna_id, type="call", interaction_date=TODAY - timedelta(days=3))
    )
    memory_db.create_interaction(
        Interaction(contact_id=anna_id, type="visit", interaction_date=TODAY - timedelta(days=40))
    )

    return memory_db


# Markers for different test types
def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "database: marks tests requiring database")
