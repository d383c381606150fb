"""Shared enumerations for the activity logger.

Action and level values are what gets persisted in the action/level columns,
so member values are part of the stored schema.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActivityAction(_ValuesMixin, str, Enum):
    """What happened to the subject of an activity log record."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CUSTOM = "custom"


class LogLevel(_ValuesMixin, str, Enum):
    """Severity tag of an activity log record (PSR-3 / syslog names)."""

    EMERGENCY = "emergency"
    ALERT = "alert"
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"
    INFO = "info"
    DEBUG = "debug"
