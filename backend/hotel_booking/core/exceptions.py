"""
Typed failures raised by the booking rule-set.

Services raise these at the point of detection; the API layer decides
which HTTP status each one maps to for a given endpoint.
"""


class BookingError(Exception):
    """Base class for booking rule violations."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class BadRequestError(BookingError):
    pass


class UnauthorizedError(BookingError):
    pass


class ForbiddenError(BookingError):
    pass


class NotFoundError(BookingError):
    pass


class ConflictError(BookingError):
    pass


class BookingNotFoundError(NotFoundError):
    """The booking id itself does not exist, as opposed to a failed lookup behind it."""
