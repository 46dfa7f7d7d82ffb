"""Kinship Source Package.

Personal relationship manager: contacts, families, invite groups,
recurring events and interaction history.

Layers:
    - core: Configuration, logging, exceptions
    - db: Database and models
    - engine: Business logic (recurrence, scoring, reminders, export)
"""

__version__ = "0.1.0"
