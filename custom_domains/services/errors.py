"""Exceptions raised by the custom domain services."""

from fastapi import status


class DomainError(Exception):
    """Base exception for custom domain operations."""

    code = "DOMAIN_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(DomainError):
    """Bad domain or URL format; the user can fix the input."""

    code = "INVALID_DOMAIN"


class ConflictError(DomainError):
    """The domain is already verified by another account."""

    code = "DOMAIN_TAKEN"
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(DomainError):
    """No such account or domain configuration."""

    code = "ACCOUNT_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class FeatureNotAvailableError(DomainError):
    """The account's subscription tier does not include custom domains."""

    code = "PRO_REQUIRED"
    status_code = status.HTTP_403_FORBIDDEN


class TransientLookupError(DomainError):
    """DNS transport failed or returned garbage; retrying may succeed."""

    code = "DNS_LOOKUP_FAILED"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
