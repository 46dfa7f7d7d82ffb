"""Kinship Test Suite.

Test organization mirrors the kinship/ package:
    tests/
    ├── conftest.py          # Shared fixtures
    ├── test_cli.py          # Command line tests
    ├── test_core/           # Config, logging, exceptions
    ├── test_db/             # Models and database tests
    └── test_engine/         # Recurrence, scoring, reminders, dashboard, export

Markers:
    - @pytest.mark.slow: Tests taking > 1 second
    - @pytest.mark.database: Tests requiring database
"""
