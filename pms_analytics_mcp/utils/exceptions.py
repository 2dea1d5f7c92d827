"""
Exception hierarchy for the PMS Analytics MCP server.

All errors raised by the adapter layer, the HTTP client, the connection
registry and the sync orchestrator derive from PMSAnalyticsError so callers
can recover at a single boundary.
"""

from typing import Any


class PMSAnalyticsError(Exception):
    """Base exception for all PMS Analytics errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for tool responses."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(PMSAnalyticsError):
    """Raised when server configuration is missing or invalid."""


class ValidationError(PMSAnalyticsError):
    """Raised when input data fails validation."""


class AuthenticationError(PMSAnalyticsError):
    """Raised when a PMS vendor rejects the supplied credentials."""


class APIError(PMSAnalyticsError):
    """Raised for non-success responses and transport failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code
        self.response_data = response_data


class ResourceNotFoundError(PMSAnalyticsError):
    """Raised when a vendor endpoint answers 404."""


class TimeoutError(PMSAnalyticsError):
    """Raised when a vendor request exceeds the configured timeout."""


class ConnectionNotFoundError(PMSAnalyticsError):
    """Raised when a connection id is not present in the registry."""

    def __init__(self, connection_id: str) -> None:
        super().__init__(
            f"Connection not found: {connection_id}",
            details={"connection_id": connection_id},
        )
        self.connection_id = connection_id


class SyncError(PMSAnalyticsError):
    """Raised when synchronizing a single connection fails."""

    def __init__(
        self,
        message: str,
        connection_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if connection_id:
            details.setdefault("connection_id", connection_id)
        super().__init__(message, details=details)
        self.connection_id = connection_id


class StorageError(PMSAnalyticsError):
    """Raised when the connection list or record store cannot be written."""
