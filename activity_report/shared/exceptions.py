"""Custom exception hierarchy for Activity Report."""

from enum import StrEnum


class ErrorCategory(StrEnum):
    """Classification of an upstream failure, decided at the transport boundary."""

    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    OTHER = "other"

    @property
    def is_soft(self) -> bool:
        """Whether the category means "no visibility" rather than a real failure."""
        return self in (ErrorCategory.FORBIDDEN, ErrorCategory.NOT_FOUND)


class ActivityReportError(Exception):
    """Base exception for all report errors."""

    pass


class ConfigError(ActivityReportError):
    """Raised when configuration or request input validation fails."""

    pass


class AuthError(ActivityReportError):
    """Raised when the GitHub token is missing or rejected."""

    pass


class QueryError(ActivityReportError):
    """Raised when a GraphQL query fails or returns an unexpected shape.

    Attributes:
        category: Failure classification (soft access denial or other)
    """

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.OTHER) -> None:
        super().__init__(message)
        self.category = category


class SoftAccessError(QueryError):
    """Raised when the token cannot see a resource (private or deleted repository)."""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.FORBIDDEN) -> None:
        super().__init__(message, category)
