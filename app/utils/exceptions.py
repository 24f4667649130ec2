"""
Custom exception classes for the application.
"""

from typing import Any, Dict, Optional


class SupportChatException(Exception):
    """Base exception class for Support Chat."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(SupportChatException):
    """Exception raised for authentication errors."""

    def __init__(self, message: str = "Not authenticated", **kwargs):
        super().__init__(message, error_code="AUTHENTICATION_ERROR", **kwargs)


class AuthorizationError(SupportChatException):
    """Exception raised for authorization errors."""

    def __init__(self, message: str = "Access denied", **kwargs):
        super().__init__(message, error_code="AUTHORIZATION_ERROR", **kwargs)


class NotFoundError(SupportChatException):
    """Exception raised when a resource is not found."""

    def __init__(self, message: str = "Resource not found", **kwargs):
        super().__init__(message, error_code="NOT_FOUND", **kwargs)


class ConflictError(SupportChatException):
    """Exception raised for conflict errors."""

    def __init__(self, message: str = "Resource conflict", **kwargs):
        super().__init__(message, error_code="CONFLICT", **kwargs)


class DatabaseError(SupportChatException):
    """Exception raised for database errors."""

    def __init__(self, message: str = "Database error", **kwargs):
        super().__init__(message, error_code="DATABASE_ERROR", **kwargs)


class WebhookNotFoundError(NotFoundError):
    """Raised when a webhook id does not exist."""

    def __init__(self, webhook_id: str):
        self.webhook_id = webhook_id
        super().__init__("Webhook not found", details={"webhook_id": webhook_id})
