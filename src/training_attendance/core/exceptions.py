class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed (dates, times, empty fields)."""


class AuthorizationError(DomainError):
    """Raised by the HTTP layer when a caller lacks the required role."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ConflictError(DomainError):
    """Raised on uniqueness violations (duplicate enrollment, registration, ...)."""


class InvalidStateError(DomainError):
    """Raised when an operation is not legal in the current lifecycle state."""


class AlreadyCheckedOutError(InvalidStateError):
    """Raised when the (student, session) pair is already checked out."""


class DeadlinePassedError(DomainError):
    """Raised when a time window (registration deadline) has closed."""


class CapacityExceededError(DomainError):
    """Raised when a class already has the maximum sessions on a date."""


class FaceNotRegisteredError(DomainError):
    """Raised when the student has no reference face."""


class FaceMismatchError(DomainError):
    """Raised when the captured face does not match the reference face."""

    def __init__(self, message: str, *, score: float = 0.0):
        super().__init__(message)
        self.score = score


class ServiceUnavailableError(DomainError):
    """Raised when an external collaborator cannot be reached."""
