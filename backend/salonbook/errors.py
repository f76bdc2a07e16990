"""
Application error hierarchy.

Services raise these; routes translate them into JSON responses of the form
{"success": false, "message": ...} with the carried status code. Anything
that is not a BookingError is treated as unexpected (500).
"""


class BookingError(Exception):
    """Base exception for all expected application errors."""
    status_code = 400

    def __init__(self, message="Request could not be completed", status_code=None, details=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        rv = dict(self.details or ())
        rv["success"] = False
        rv["message"] = self.message
        return rv


class ValidationError(BookingError):
    """400-level input problem (malformed number/date, bad enum, bad amount)."""
    status_code = 400


class AuthenticationError(BookingError):
    """Missing, invalid or expired credentials."""
    status_code = 401


class ForbiddenError(BookingError):
    """Record exists but belongs to another account, or role not allowed."""
    status_code = 403

    def __init__(self, message="Access denied", details=None):
        super().__init__(message, details=details)


class NotFoundError(BookingError):
    status_code = 404

    def __init__(self, message="Resource not found", details=None):
        super().__init__(message, details=details)


class ConflictError(BookingError):
    """Uniqueness conflicts (duplicate client email/phone, username)."""
    status_code = 409


class NoSessionsRemainingError(BookingError):
    """Raised when a sale has no sessions left to consume."""
    status_code = 400

    def __init__(self, sale_id: int):
        super().__init__(
            f"Sale {sale_id} has no remaining sessions",
            details={"sale_id": sale_id, "remaining_sessions": 0},
        )


class CapacityExceededError(BookingError):
    """Booking would exceed the sessions a customer still has for a service."""
    status_code = 400

    def __init__(self, max_sessions: int, planned_count: int):
        message = (
            f"At most {max_sessions} appointment(s) can be planned for this customer "
            f"and service; {planned_count} already planned"
        )
        super().__init__(
            message,
            details={"max_sessions": max_sessions, "planned_count": planned_count},
        )
