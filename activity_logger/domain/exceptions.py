"""Domain exceptions for the activity logger.

Identity resolution never raises (unresolvable objects become (None, None));
these exceptions cover invalid caller input and missing configuration.
Persistence failures live in activity_logger.infrastructure.exceptions.
"""

from typing import Any


class ActivityLoggerException(Exception):
    """Base exception for all activity logger errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, batch size).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(ActivityLoggerException):
    """Raised when caller input is invalid (e.g. unknown log level)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class SqlNotConfiguredException(ActivityLoggerException):
    """Raised when a session is requested but no database engine could be built."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )


class ResourceNotFoundException(ActivityLoggerException):
    """Raised when an entity to update no longer exists."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Model or type name (e.g. 'Comment').
            resource_id: The primary key value that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
