"""
Domain exceptions raised by bozo_bets services.

Each error carries the HTTP status the API layer should answer with, so
routers can translate any of them with a single handler.
"""
from typing import Any, Optional


class BozoBetsError(Exception):
    """Base exception for domain errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BozoBetsError):
    """Input failed a business rule."""

    status_code = 400


class AuthenticationError(BozoBetsError):
    """Missing or invalid credentials."""

    status_code = 401


class PermissionDeniedError(BozoBetsError):
    """Caller lacks rights for the operation."""

    status_code = 403


class NotFoundError(BozoBetsError):
    """Referenced entity does not exist."""

    status_code = 404


class ConflictError(BozoBetsError):
    """Operation would violate a uniqueness rule."""

    status_code = 409


class QuotaExceededError(BozoBetsError):
    """External API quota is spent."""

    status_code = 429
