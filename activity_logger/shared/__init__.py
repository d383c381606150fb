"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from activity_logger.shared.enums import ActivityAction, LogLevel
from activity_logger.shared.utils import ensure_utc, utc_now

__all__ = [
    "ActivityAction",
    "LogLevel",
    "utc_now",
    "ensure_utc",
]
