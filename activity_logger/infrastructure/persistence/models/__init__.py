"""Persistence models: ORM entities."""

from activity_logger.infrastructure.persistence.models.activity_log import ActivityLog

__all__ = ["ActivityLog"]
