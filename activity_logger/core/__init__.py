"""Core: process configuration."""

from activity_logger.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
