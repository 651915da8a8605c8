# storefront/utils/exceptions.py
"""
Central place for all application-specific exceptions.
Services raise these; the error handlers turn them into JSON responses.
"""
from __future__ import annotations


class StorefrontError(Exception):
    """Base exception for all app errors, never raised directly."""
    status_code = 500
    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, **payload):
        self.message = message or self.message
        super().__init__(self.message)
        self.payload = payload


class ValidationError(StorefrontError):
    status_code = 400
    message = "Invalid input"


class AuthenticationError(StorefrontError):
    status_code = 401
    message = "Authentication required"


class AuthorizationError(StorefrontError):
    status_code = 403
    message = "You do not have permission to perform this action"


class NotFoundError(StorefrontError):
    status_code = 404
    message = "The requested resource was not found"


class ConflictError(StorefrontError):
    status_code = 409
    message = "The resource already exists"
