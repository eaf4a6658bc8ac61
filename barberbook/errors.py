# barberbook/errors.py

"""
Errors raised by the booking core.

Each carries the HTTP status it is rendered with; ``main.py`` registers one
handler for the whole family.
"""


class BookingError(Exception):
    """Base class for booking errors."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthorized(BookingError):
    """Missing or invalid caller identity."""

    status_code = 401


class Forbidden(BookingError):
    """Caller is authenticated but not entitled to the resource."""

    status_code = 403


class NotFound(BookingError):
    status_code = 404


class Conflict(BookingError):
    """The request clashes with the current state of a resource."""

    status_code = 409


class InvalidTransition(Conflict):
    """Status change not allowed by the transition table."""


class ValidationError(BookingError):
    """Malformed request, e.g. an interval whose start is not before its end."""

    status_code = 400


class SlotUnavailable(ValidationError):
    """The barber already has an active booking overlapping the interval."""


class InternalError(BookingError):
    """Storage failure."""

    status_code = 500
