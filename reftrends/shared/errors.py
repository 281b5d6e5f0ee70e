"""Exception hierarchy shared by the sync jobs, services and web layer."""

from __future__ import annotations


class RefTrendsError(Exception):
    """Base class for all application errors."""


class ApiFootballError(RefTrendsError):
    """API-Football reported an error payload or a non-retryable status."""

    def __init__(self, message: str, *, status: int | None = None, errors: object = None) -> None:
        super().__init__(message)
        self.status = status
        self.errors = errors


class ApiKeyMissingError(ApiFootballError):
    pass


class NotFoundError(RefTrendsError):
    pass


class ValidationError(RefTrendsError):
    pass


__all__ = [
    "RefTrendsError",
    "ApiFootballError",
    "ApiKeyMissingError",
    "NotFoundError",
    "ValidationError",
]
