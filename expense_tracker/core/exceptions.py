class FinanceTrackerException(Exception):
    """Base exception for expense tracker"""

    pass


class UnauthorizedException(FinanceTrackerException):
    """Raised when JWT validation fails"""

    pass


class NotFoundException(FinanceTrackerException):
    """Raised when resource not found"""

    pass


class ForbiddenException(FinanceTrackerException):
    """Raised when user tries to access another user's data"""

    pass


class ValidationException(FinanceTrackerException):
    """Raised for malformed filter values and business rule violations"""

    pass


class StoreException(FinanceTrackerException):
    """Raised when the ledger store fails to complete a read or write"""

    pass
