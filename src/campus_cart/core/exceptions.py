"""Lifecycle error taxonomy.

Services raise these; the HTTP layer maps each class to a status code and
renders ``{"detail": {"code": ..., "message": ...}}``.
"""


class LifecycleError(Exception):
    """Base class for expected, user-visible failures."""

    status_code = 400
    default_code = "ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotFoundError(LifecycleError):
    """Entity missing, or its state/ownership precondition was not met.

    Both cases share this error so callers cannot probe for rows they
    have no relationship with.
    """

    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(LifecycleError):
    """A concurrent claim was lost or a reservation overlaps."""

    status_code = 409
    default_code = "CONFLICT"


class InvalidStateError(ConflictError):
    """The entity exists and is visible but cannot make this transition now."""

    default_code = "INVALID_STATE"


class InvalidInputError(LifecycleError):
    status_code = 400
    default_code = "INVALID_INPUT"


class ForbiddenError(LifecycleError):
    status_code = 403
    default_code = "FORBIDDEN"
