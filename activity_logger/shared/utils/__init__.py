"""Shared utilities: UTC datetime helpers."""

from activity_logger.shared.utils.datetime import ensure_utc, utc_now

__all__ = [
    "utc_now",
    "ensure_utc",
]
