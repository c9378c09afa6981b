"""
Custom exceptions for the booking lifecycle.
Raised in lifecycle.py and caught in the views for clean error handling.
"""


class BookingLifecycleError(Exception):
    """Base exception for all booking lifecycle errors."""
    pass


class BookingValidationError(BookingLifecycleError):
    """Input is missing or malformed. Nothing was written; the user may retry."""
    pass


class DuplicateBookingError(BookingValidationError):
    """The customer already has a pending/approved/assigned booking on that date."""
    pass


class InvalidTransitionError(BookingValidationError):
    """The booking's current status does not allow the requested event."""

    def __init__(self, event, current_status):
        self.event = event
        self.current_status = current_status
        super().__init__(
            f"This booking is {current_status or 'in an unknown state'}; {event} is not allowed."
        )


class BookingAuthorizationError(BookingLifecycleError):
    """The caller does not own the booking or assignment it tried to act on."""
    pass


class LifecycleNotFoundError(BookingLifecycleError):
    """Base for ids that do not resolve to a row."""
    pass


class BookingNotFoundError(LifecycleNotFoundError):
    pass


class AssignmentNotFoundError(LifecycleNotFoundError):
    pass


class WorkerNotFoundError(LifecycleNotFoundError):
    pass
