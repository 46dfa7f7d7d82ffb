"""Structured JSON logging for Kinship.

Every logger lives under the ``kinship`` namespace and carries its fields in
a ``context`` dict passed through ``extra``:

    logger.info("Slots generated", extra={"context": {"template_id": 3, "created": 7}})

Entity ids (``template_id``, ``contact_id``, ...) are listed first in both
outputs so a slot, contact or reminder can be followed through the log. The
file log is one JSON object per line; the console gets a short summary.

Usage:
    from kinship.core.logging import get_logger, setup_logging

    setup_logging(log_dir, debug=False)  # Call once at startup
    logger = get_logger(__name__)
"""

import json
import logging
from datetime import date, datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

ROOT_LOGGER_NAME = "kinship"
LOG_FILE_NAME = "kinship.log"
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5

# Order in which entity ids appear in formatted output
ENTITY_KEYS = (
    "template_id",
    "slot_id",
    "contact_id",
    "family_id",
    "invite_group_id",
    "interaction_id",
    "reminder_id",
)


def _plain(value: Any) -> Any:
    """Dates become ISO strings, everything else passes through."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context of a record, entity ids first, None values dropped.

    Args:
        record: The log record

    Returns:
        Ordered context dict (empty when the record carries none)
    """
    raw = getattr(record, "context", None)
    if not isinstance(raw, dict):
        return {}

    ordered: dict[str, Any] = {}
    # Entity ids in fixed order
    for key in ENTITY_KEYS:
        if raw.get(key) is not None:
            ordered[key] = raw[key]
    # Remaining fields as given
    for key, value in raw.items():
        if key not in ordered and value is not None:
            ordered[key] = _plain(value)
    return ordered


class JSONFormatter(logging.Formatter):
    """One JSON object per record for the file log."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }

        context = record_context(record)
        if context:
            log_data["context"] = context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Short line for the terminal: ``12:00:01 INFO engine.recurrence: msg [template#3, created=7]``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S")
        name = record.name
        if name.startswith(ROOT_LOGGER_NAME + "."):
            name = name[len(ROOT_LOGGER_NAME) + 1 :]
        message = record.getMessage()

        parts = []
        for key, value in record_context(record).items():
            if key in ENTITY_KEYS:
                # template_id=3 -> template#3
                parts.append(f"{key[: -len('_id')]}#{value}")
            else:
                parts.append(f"{key}={value}")
        if parts:
            message += f" [{', '.join(parts)}]"

        return f"{timestamp} {record.levelname[:4]:4s} {name}: {message}"


_logging_initialized = False


def setup_logging(log_dir: Optional[Path] = None, debug: bool = False) -> None:
    """Attach the console and rotating file handlers to the kinship logger.

    Call once at startup; later calls are no-ops. The console shows warnings
    only, or everything when ``debug`` is set. The file always gets DEBUG.

    Args:
        log_dir: Directory for log files. Defaults to ~/.kinship/logs
        debug: Echo debug output to the console
    """
    global _logging_initialized

    if _logging_initialized:
        return

    if log_dir is None:
        log_dir = Path.home() / ".kinship" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    console_handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(console_handler)

    # File handler with rotation
    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(file_handler)

    _logging_initialized = True
    root_logger.info("Logging initialized", extra={"context": {"log_dir": str(log_dir)}})


def get_logger(name: str) -> logging.Logger:
    """Get the logger for a module under the kinship namespace.

    ``kinship.*`` names are used as they are, a script run directly
    (``__main__``) logs as ``kinship.script``, anything else is prefixed.

    Args:
        name: Module name (typically __name__)
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    if name == "__main__":
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.script")
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
