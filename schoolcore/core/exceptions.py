class SchoolCoreException(Exception):
    """Base exception for school core"""

    pass


class UnauthorizedException(SchoolCoreException):
    """Raised when no valid session is present"""

    pass


class ForbiddenException(SchoolCoreException):
    """Raised when a valid session lacks the required capability or role"""

    pass


class NotFoundException(SchoolCoreException):
    """Raised when a resource does not exist within the caller's school"""

    pass


class ConflictException(SchoolCoreException):
    """Raised when a write would break a uniqueness or state rule"""

    pass


class CascadeBlockedException(SchoolCoreException):
    """Raised when a hard delete is refused because active dependents exist"""

    def __init__(self, message: str, count: int):
        super().__init__(message)
        self.count = count


class ValidationException(SchoolCoreException):
    """Raised for business logic validation errors"""

    pass
