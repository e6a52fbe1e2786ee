"""Domain exceptions for the package search service.

Defines exceptions that represent failures the presentation layer must
report. They are independent of infrastructure concerns; exception handlers
map them to HTTP responses.
"""

from typing import Any


class PackageSearchException(Exception):
    """Base exception for all package search errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context.
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

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PackageSearchException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(PackageSearchException):
    """Raised when a protected route is called without valid credentials."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class SqlNotConfiguredException(PackageSearchException):
    """Raised when the store is not a configured PostgreSQL database."""

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(
            message="Package search requires a PostgreSQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
            details={"reason": reason} if reason else {},
        )


class SearchUnavailableException(PackageSearchException):
    """Raised when the search statement fails in the store (timeout, SQL error, connection loss)."""

    def __init__(self, reason: str) -> None:
        """Initialize with the underlying failure reason.

        Args:
            reason: Short description of the store error.
        """
        super().__init__(
            "Search is temporarily unavailable",
            "SEARCH_UNAVAILABLE",
            {"reason": reason},
        )


class ViewRefreshException(PackageSearchException):
    """Raised when rebuilding the search materialized view fails."""

    def __init__(self, view_name: str, reason: str) -> None:
        """Initialize with view name and failure reason.

        Args:
            view_name: Name of the materialized view being refreshed.
            reason: Short description of the store error.
        """
        super().__init__(
            f"Refreshing materialized view '{view_name}' failed",
            "VIEW_REFRESH_FAILED",
            {"view_name": view_name, "reason": reason},
        )
