"""Tests for logging setup and formatting."""

import json
import logging
from datetime import date

import pytest

import kinship.core.logging as log_module
from kinship.core.logging import (
    ConsoleFormatter,
    JSONFormatter,
    get_logger,
    record_context,
    setup_logging,
)


def _record(message: str, context=None) -> logging.LogRecord:
    record = logging.LogRecord(
        "kinship.engine.recurrence", logging.INFO, __file__, 1, message, None, None
    )
    if context is not None:
        record.context = context
    return record


@pytest.fixture
def fresh_logging():
    """Allow setup_logging to run and remove the handlers it adds."""
    root_logger = logging.getLogger("kinship")
    existing = list(root_logger.handlers)
    log_module._logging_initialized = False
    yield root_logger
    for handler in root_logger.handlers[:]:
        if handler not in existing:
            root_logger.removeHandler(handler)
            handler.close()
    log_module._logging_initialized = False


class TestGetLogger:
    """Test logger naming."""

    def test_get_logger_returns_logger(self):
        """get_logger returns a Logger instance."""
        assert isinstance(get_logger(__name__), logging.Logger)

    def test_same_name_returns_same_logger(self):
        """Same name returns same logger instance."""
        assert get_logger("test.module") is get_logger("test.module")

    def test_prefixes_namespace(self):
        """Loggers live under the kinship namespace."""
        assert get_logger("engine").name == "kinship.engine"
        assert get_logger("kinship.db.database").name == "kinship.db.database"
        assert get_logger("kinship").name == "kinship"

    def test_script_logger(self):
        """A script run directly logs as kinship.script."""
        assert get_logger("__main__").name == "kinship.script"


class TestSetupLogging:
    """Test handler installation."""

    def test_creates_handlers(self, tmp_path, fresh_logging):
        """setup_logging creates file and console handlers."""
        existing = list(fresh_logging.handlers)
        setup_logging(log_dir=tmp_path / "logs")
        added = [h for h in fresh_logging.handlers if h not in existing]
        assert len(added) == 2
        assert (tmp_path / "logs" / "kinship.log").exists()

    def test_second_call_is_noop(self, tmp_path, fresh_logging):
        """Handlers are only installed once."""
        setup_logging(log_dir=tmp_path / "logs")
        count = len(fresh_logging.handlers)
        setup_logging(log_dir=tmp_path / "other")
        assert len(fresh_logging.handlers) == count
        assert not (tmp_path / "other").exists()

    @pytest.mark.parametrize("debug,level", [(False, logging.WARNING), (True, logging.DEBUG)])
    def test_console_level_follows_debug(self, tmp_path, fresh_logging, debug, level):
        """Console shows warnings, or everything in debug mode."""
        existing = list(fresh_logging.handlers)
        setup_logging(log_dir=tmp_path / "logs", debug=debug)
        console = [
            h
            for h in fresh_logging.handlers
            if h not in existing and isinstance(h.formatter, ConsoleFormatter)
        ]
        assert len(console) == 1
        assert console[0].level == level


class TestRecordContext:
    """Test context normalization."""

    def test_entity_ids_first(self):
        """Entity ids come first in fixed order, other fields keep their order."""
        record = _record("x", {"created": 7, "contact_id": 2, "template_id": 3})
        assert list(record_context(record)) == ["template_id", "contact_id", "created"]

    def test_none_values_dropped(self):
        """Fields set to None are left out."""
        record = _record("x", {"contact_id": None, "family_id": 4, "notes": None})
        assert record_context(record) == {"family_id": 4}

    def test_dates_become_iso_strings(self):
        """Dates are written as ISO strings."""
        record = _record("x", {"slot_date": date(2026, 4, 29)})
        assert record_context(record) == {"slot_date": "2026-04-29"}

    def test_missing_or_odd_context(self):
        """Records without a dict context have an empty context."""
        assert record_context(_record("x")) == {}
        assert record_context(_record("x", "not a dict")) == {}


class TestJSONFormatter:
    """Test JSON log format."""

    def test_format_includes_context(self):
        """Context passed via extra ends up in the JSON record."""
        record = _record("Slots generated", {"created": 7, "template_id": 3})
        data = json.loads(JSONFormatter().format(record))
        assert data["level"] == "INFO"
        assert data["module"] == "kinship.engine.recurrence"
        assert data["message"] == "Slots generated"
        assert data["context"] == {"template_id": 3, "created": 7}
        assert data["timestamp"].endswith("Z")

    def test_no_context_key_when_empty(self):
        """Records without context carry no context key."""
        data = json.loads(JSONFormatter().format(_record("Plain")))
        assert "context" not in data


class TestConsoleFormatter:
    """Test console log format."""

    def test_short_name_and_entity_tags(self):
        """Namespace prefix is dropped and entity ids are shown as name#id."""
        line = ConsoleFormatter().format(
            _record("Slots generated", {"created": 7, "template_id": 3})
        )
        assert "INFO engine.recurrence: Slots generated [template#3, created=7]" in line

    def test_no_brackets_without_context(self):
        """A record without context has no trailing brackets."""
        line = ConsoleFormatter().format(_record("Plain"))
        assert line.endswith("engine.recurrence: Plain")
