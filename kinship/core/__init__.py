"""Core package - Configuration, logging, exceptions.

This package provides foundational infrastructure used by all other layers.

Modules:
    - config: Environment and configuration management
    - logging: Structured JSON logging
    - exceptions: Custom exception hierarchy
"""

from kinship.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    ExportError,
    KinshipError,
    ValidationError,
)

__all__ = [
    "KinshipError",
    "ConfigurationError",
    "ValidationError",
    "DatabaseError",
    "ExportError",
]
