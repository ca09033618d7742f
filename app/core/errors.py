"""Domain error taxonomy.

Every rejection raised by the geo search or the session workflow is a
``ServiceError`` subclass carrying a stable ``Reason`` code, so callers can
tell "session at capacity" from "check-in window closed" without parsing
messages. The HTTP layer maps each class to a status code.
"""

from enum import Enum


class Reason(str, Enum):
    """Stable, machine-readable rejection codes."""

    INVALID_COORDINATE = "invalid_coordinate"
    INVALID_RADIUS = "invalid_radius"
    INVALID_LIMIT = "invalid_limit"
    INVALID_STATUS = "invalid_status"
    INVALID_NOTE = "invalid_note"
    INVALID_METHOD = "invalid_method"
    INVALID_TIMES = "invalid_times"
    INVALID_TITLE = "invalid_title"
    INVALID_CAPACITY = "invalid_capacity"
    INVALID_VENUE = "invalid_venue"
    CLUB_NOT_FOUND = "club_not_found"
    SESSION_NOT_FOUND = "session_not_found"
    RSVP_NOT_FOUND = "rsvp_not_found"
    NOT_CLUB_ADMIN = "not_club_admin"
    SESSION_CANCELLED = "session_cancelled"
    SESSION_PAST = "session_past"
    SESSION_FULL = "session_full"
    ALREADY_CHECKED_IN = "already_checked_in"
    CHECKIN_NOT_OPEN = "checkin_not_open"
    CHECKIN_CLOSED = "checkin_closed"
    CHECKIN_OPEN = "checkin_open"
    ATTENDANCE_RECORDED = "attendance_recorded"
    TOO_FAR_FROM_VENUE = "too_far_from_venue"


class ServiceError(Exception):
    """Base class for recoverable, request-scoped errors."""

    status_code = 400

    def __init__(self, message: str, reason: Reason):
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_dict(self) -> dict:
        return {"detail": self.message, "reason": self.reason.value}


class ValidationError(ServiceError):
    """Malformed input, rejected before touching the database."""

    status_code = 400


class PermissionDeniedError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """The request is well-formed but the current state forbids it."""

    status_code = 409


class AlreadyExistsError(ConflictError):
    """A unique constraint fired on write (a concurrent request won the race)."""
