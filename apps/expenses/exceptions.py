"""
Domain exceptions for expenses app.

These exceptions represent business rule violations and are
caught in views and converted to HTTP responses.
"""


class ExpenseServiceError(Exception):
    """Base exception for expense service errors."""
    pass


class ExpenseNotFoundError(ExpenseServiceError):
    """Raised when an expense does not exist."""
    pass


class InvalidExpenseError(ExpenseServiceError):
    """Raised when expense data breaks a business rule."""
    pass


class ExpensePermissionError(ExpenseServiceError):
    """Raised when a user other than the payer or a group admin changes an expense."""
    pass
