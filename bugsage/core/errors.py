"""Domain errors raised by services and rendered as failure envelopes by the API."""


class BugSageError(Exception):
    """Base error; carries the HTTP status and the message shown to the caller."""

    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(BugSageError):
    """Missing or malformed input."""

    status_code = 400


class Unauthenticated(BugSageError):
    """No valid session."""

    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class PermissionDenied(BugSageError):
    """Role or ownership check failed."""

    status_code = 403

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message)


class NotFound(BugSageError):
    status_code = 404


class Conflict(BugSageError):
    """Uniqueness or referential rule violated. Reported as 400 like other input errors."""

    status_code = 400


class MethodNotAllowed(BugSageError):
    status_code = 405

    def __init__(self, message: str = "Method not allowed") -> None:
        super().__init__(message)


class InternalError(BugSageError):
    """Persistence or other server failure; the message never includes the cause."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
