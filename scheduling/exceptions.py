"""
Domain exceptions for the scheduling core.

Every error carries a human-readable message, a stable code and a details
dict naming the first offending date/resource, so the API layer can render
it without knowing where it was raised.
"""

from typing import Any, Dict, Optional


class SchedulingError(Exception):
    """Base exception for all scheduling errors."""

    status_code = 500
    retryable = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {'message': self.message, 'code': self.code}
        payload.update(self.details)
        if self.retryable:
            payload['retryable'] = True
        return payload


class ValidationError(SchedulingError):
    """Malformed or missing input. Never retried."""

    status_code = 400


class InvalidRange(ValidationError):
    """A start time is not strictly before its end time."""


class NotFound(ValidationError):
    """A referenced resource, window or occurrence does not exist."""

    status_code = 404


class AlreadyExists(ValidationError):
    """The single-create path hit an existing (resource, day) window."""

    status_code = 409


class PermissionDenied(SchedulingError):
    """Caller may not modify another party's availability."""

    status_code = 403


class ConflictError(SchedulingError):
    """Availability-window or exclusive-overlap violation."""

    status_code = 409


class CapacityError(SchedulingError):
    """The occurrence is full."""

    status_code = 409


class RangeTooLargeError(SchedulingError):
    """A recurrence would emit more occurrences than allowed."""

    status_code = 422


class TransientStorageError(SchedulingError):
    """
    Infrastructure failure while reading or writing.

    Safe for the caller to retry: occurrence identity is derived from the
    request id, so a retry never duplicates a series.
    """

    status_code = 503
    retryable = True
