# hostel_leave/core/exceptions.py


class LeaveError(ValueError):
    """Base class for leave lifecycle failures.

    ``kind`` is the stable discriminator handed to API clients. Only
    ``InvalidState`` is worth retrying, and only after re-reading the record.
    """

    kind = "LeaveError"
    retryable = False

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class MissingField(LeaveError):
    kind = "MissingField"

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"{field} is required", field=field)


class InvalidDateRange(LeaveError):
    kind = "InvalidDateRange"


class Forbidden(LeaveError):
    kind = "Forbidden"


class InvalidState(LeaveError):
    kind = "InvalidState"
    retryable = True


class LeaveNotFound(LookupError):
    """No leave application with the requested id (or not visible to the caller)."""
