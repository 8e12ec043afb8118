"""Domain exceptions raised by the service layer.

Routers let these propagate; ``polylearn.main`` maps each class to an HTTP
status code via ``STATUS_CODES``.
"""


class PolyLearnError(Exception):
    """Base class for all expected, user-facing failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PolyLearnError):
    """Malformed or missing input."""


class ConflictError(ValidationError):
    """Input collides with an existing record (e.g. a duplicate email)."""


class NotFoundError(PolyLearnError):
    """Referenced record does not exist (or is not visible to the caller)."""


class InvalidStateError(PolyLearnError):
    """Transition attempted from a state that does not allow it."""


class AuthorizationError(PolyLearnError):
    """Actor lacks the privilege the operation requires."""


class StorageError(PolyLearnError):
    """Underlying file or database I/O failed."""


STATUS_CODES = {
    ConflictError: 409,
    ValidationError: 400,
    NotFoundError: 404,
    InvalidStateError: 409,
    AuthorizationError: 403,
    StorageError: 500,
}


def status_code_for(exc: PolyLearnError) -> int:
    """Resolve the HTTP status for an exception, most specific class first."""
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500
