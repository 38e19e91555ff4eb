"""
Exception hierarchy for the persistence layer.

Every failure a caller can act on derives from AppBaseError so request
handlers can translate them in one place.
"""

from typing import Any, Optional


class AppBaseError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ConfigurationError(AppBaseError):
    """Required startup configuration is missing. Not retryable."""


class DatabaseConnectionError(AppBaseError):
    """The database could not be reached within the configured timeouts."""


class ValidationError(AppBaseError):
    """A field value is malformed, out of range, or references a missing record."""

    def __init__(self, message: str, detail: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message, detail)
        self.field = field


class ConstraintViolation(AppBaseError):
    """A write was rejected by a unique index."""

    def __init__(self, message: str, detail: Optional[str] = None, key: Optional[dict[str, Any]] = None):
        super().__init__(message, detail)
        self.key = key or {}


class NotFoundError(AppBaseError):
    """The requested record does not exist."""
