"""Configuration management for Kinship.

Loads configuration from environment variables and .env file.
Provides validation and sensible defaults.

Usage:
    from kinship.core.config import get_config, validate_config

    config = get_config()
    issues = validate_config(config)
    if issues:
        for issue in issues:
            print(f"Config issue: {issue}")
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from kinship.core.exceptions import ConfigurationError

# Default paths (defined once, used by both Config and load_config)
DEFAULT_DB_PATH = Path.home() / ".kinship" / "kinship.db"
DEFAULT_LOG_PATH = Path.home() / ".kinship" / "logs"
DEFAULT_EXPORT_PATH = Path.home() / ".kinship" / "exports"

DEFAULT_SLOT_MONTHS = 3
DEFAULT_UPCOMING_LIMIT = 20
DEFAULT_BIRTHDAY_DAYS = 14


@dataclass
class Config:
    """Application configuration.

    Attributes:
        db_path: Path to SQLite database file
        log_path: Directory for log files
        export_path: Default directory for data exports
        slot_months_ahead: Months of event slots generated per template
        upcoming_limit: Number of slots shown in the upcoming list
        birthday_window_days: Days ahead checked for upcoming birthdays
        debug: Enable debug mode
    """

    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    log_path: Path = field(default_factory=lambda: DEFAULT_LOG_PATH)
    export_path: Path = field(default_factory=lambda: DEFAULT_EXPORT_PATH)
    slot_months_ahead: int = DEFAULT_SLOT_MONTHS
    upcoming_limit: int = DEFAULT_UPCOMING_LIMIT
    birthday_window_days: int = DEFAULT_BIRTHDAY_DAYS
    debug: bool = False


def load_env_file(path: Path) -> dict[str, str]:
    """Parse .env file.

    Handles:
        - KEY=VALUE format
        - Comments (lines starting with #)
        - Blank lines
        - Quoted values

    Args:
        path: Path to .env file

    Returns:
        Dictionary of environment variables
    """
    env_vars: dict[str, str] = {}

    if not path.exists():
        return env_vars

    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            # Skip blank lines and comments
            if not line or line.startswith("#"):
                continue

            # Parse KEY=VALUE
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()

                # Remove quotes if present
                if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
                    value = value[1:-1]

                if key:
                    env_vars[key] = value

    return env_vars


def _get_path(key: str, default: Path, env_vars: dict[str, str]) -> Path:
    """Get path from environment, expanding ~ and resolving."""
    value = os.environ.get(key) or env_vars.get(key)
    if value:
        return Path(value).expanduser().resolve()
    return default


def _get_int(key: str, default: int, env_vars: dict[str, str]) -> int:
    """Get integer from environment."""
    value = os.environ.get(key) or env_vars.get(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from e


def _get_bool(key: str, default: bool, env_vars: dict[str, str]) -> bool:
    """Get boolean from environment."""
    value = os.environ.get(key) or env_vars.get(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def load_config(env_file: Optional[Path] = None) -> Config:
    """Load configuration from environment and .env file.

    Priority:
        1. Environment variables (highest)
        2. .env file
        3. Default values (lowest)

    Args:
        env_file: Path to .env file. Defaults to .env in current directory.

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If a numeric setting cannot be parsed
    """
    if env_file is None:
        env_file = Path.cwd() / ".env"

    env_vars = load_env_file(Path(env_file))

    # Environment wins over .env, .env wins over defaults

    return Config(
        db_path=_get_path("KINSHIP_DB_PATH", DEFAULT_DB_PATH, env_vars),
        log_path=_get_path("KINSHIP_LOG_PATH", DEFAULT_LOG_PATH, env_vars),
        export_path=_get_path("KINSHIP_EXPORT_PATH", DEFAULT_EXPORT_PATH, env_vars),
        slot_months_ahead=_get_int("KINSHIP_SLOT_MONTHS", DEFAULT_SLOT_MONTHS, env_vars),
        upcoming_limit=_get_int("KINSHIP_UPCOMING_LIMIT", DEFAULT_UPCOMING_LIMIT, env_vars),
        birthday_window_days=_get_int(
            "KINSHIP_BIRTHDAY_DAYS", DEFAULT_BIRTHDAY_DAYS, env_vars
        ),
        debug=_get_bool("KINSHIP_DEBUG", False, env_vars),
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration.

    Checks:
        - Required paths exist or can be created
        - Paths are writable
        - Numeric settings are positive

    Args:
        config: Configuration to validate

    Returns:
        List of issues (empty if valid)
    """
    issues: list[str] = []

    # Check database directory
    db_dir = config.db_path.parent
    try:
        db_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(db_dir, os.W_OK):
            issues.append(f"Database directory not writable: {db_dir}")
    except OSError as e:
        issues.append(f"Cannot create database directory {db_dir}: {e}")

    # Check log directory
    try:
        config.log_path.mkdir(parents=True, exist_ok=True)
        if not os.access(config.log_path, os.W_OK):
            issues.append(f"Log directory not writable: {config.log_path}")
    except OSError as e:
        issues.append(f"Cannot create log directory {config.log_path}: {e}")

    # Numeric settings must be positive
    if config.slot_months_ahead < 1:
        issues.append(
            f"KINSHIP_SLOT_MONTHS must be at least 1, got {config.slot_months_ahead}"
        )
    if config.upcoming_limit < 1:
        issues.append(f"KINSHIP_UPCOMING_LIMIT must be at least 1, got {config.upcoming_limit}")
    if config.birthday_window_days < 1:
        issues.append(
            f"KINSHIP_BIRTHDAY_DAYS must be at least 1, got {config.birthday_window_days}"
        )

    return issues


# Singleton config
_config: Optional[Config] = None


def get_config() -> Config:
    """Return cached configuration singleton.

    Loads configuration on first call, returns cached version thereafter.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset cached configuration.

    Used primarily for testing.
    """
    global _config
    _config = None
