"""
Domain exceptions for reminders app.
"""


class ReminderServiceError(Exception):
    """Base exception for reminder service errors."""
    pass


class ReminderNotFoundError(ReminderServiceError):
    """Raised when a reminder does not exist."""
    pass


class InvalidReminderError(ReminderServiceError):
    """Raised when reminder data breaks a business rule."""
    pass
