"""Application ports (protocols)."""

from activity_logger.application.interfaces.repositories import IActivityLogRepository

__all__ = ["IActivityLogRepository"]
