"""Kinship Exception Hierarchy.

All custom exceptions inherit from KinshipError.

Exception Hierarchy:
    KinshipError (base)
    ├── ConfigurationError
    ├── ValidationError
    ├── DatabaseError
    └── ExportError
"""


class KinshipError(Exception):
    """Base exception for all Kinship errors.

    Allows callers to catch every application error in one place.
    """

    pass


class ConfigurationError(KinshipError):
    """Configuration is invalid or missing.

    Raised when:
        - An environment value cannot be parsed
        - Configuration file is malformed
    """

    pass


class ValidationError(KinshipError):
    """Data validation failed.

    Raised when:
        - Required field is missing
        - Field value is out of range
        - A recurrence rule mixes or omits its monthly sub-modes
    """

    pass


class DatabaseError(KinshipError):
    """Database operation failed.

    Raised when:
        - Database file cannot be opened
        - Query execution fails
        - Foreign key constraint violated

    A duplicate event slot is NOT a DatabaseError; the slot generator
    treats it as "already exists".
    """

    pass


class ExportError(KinshipError):
    """Data export failed.

    Raised when:
        - Output file or workbook cannot be written
    """

    pass
