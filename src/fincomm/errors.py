"""Domain exceptions raised by the service layer.

Each error carries the HTTP status and machine-readable code the global
error handler renders, so services never import FastAPI.
"""


class FincommError(Exception):
    """Base class for expected, caller-visible failures."""

    status_code: int = 400
    code: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FincommError):
    """Input has the wrong shape or is out of range."""

    status_code = 422
    code = "validation_error"


class NotFoundError(FincommError):
    """A referenced row does not exist."""

    status_code = 404
    code = "not_found"


class StateError(FincommError):
    """The operation is not allowed in the target's current state."""

    status_code = 409
    code = "invalid_state"


class ConflictError(FincommError):
    """A uniqueness or reference constraint would be violated."""

    status_code = 409
    code = "conflict"


class UnavailableError(FincommError):
    """The backing data store could not be reached."""

    status_code = 503
    code = "unavailable"
