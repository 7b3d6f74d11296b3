"""Domain error types."""
from typing import Optional


class DomainError(Exception):
    """Base domain error."""
    pass


class NotFoundError(DomainError):
    """Resource not found."""
    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with id {identifier} not found")


class ValidationError(DomainError):
    """Malformed submission (wrong list size, duplicate ordinal/priority, ...)."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthorizationError(DomainError):
    """Authorization error."""
    def __init__(self, message: str = "Not authorized"):
        self.message = message
        super().__init__(message)


class ConflictError(DomainError):
    """Resource conflict error."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidPhaseError(DomainError):
    """Operation attempted outside the phase where it is legal."""
    def __init__(self, message: str, expected: Optional[str] = None, actual: Optional[str] = None):
        self.message = message
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class LockedError(DomainError):
    """Write attempted on a willing selection after both partners locked in."""
    def __init__(self, message: str = "Willing box is locked"):
        self.message = message
        super().__init__(message)
