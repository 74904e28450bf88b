"""
Domain exceptions for bookings, campaigns and purchase orders.

All derive from ValueError so callers that already catch ValueError keep
working; each carries the HTTP status the JSON layer answers with.
"""


class BookingError(ValueError):
    """Base class for business-rule failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingError):
    """An id does not resolve to an existing entity."""

    status_code = 404


class ConflictError(BookingError):
    """
    Availability overlap or duplicate unique record.

    Attributes:
        conflicts: Reference codes of the records blocking the request
    """

    status_code = 409

    def __init__(self, message: str, conflicts: list = None):
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class InvalidStateError(BookingError):
    """Operation not allowed from the current status, or bad date ordering."""

    status_code = 400


class ValidationError(BookingError):
    """Missing required fields or malformed values."""

    status_code = 400
