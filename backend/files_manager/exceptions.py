"""Error taxonomy shared by the services, the HTTP layer and the worker."""


class FilesManagerError(Exception):
    """Base class. `status_code` is what the HTTP layer answers with."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthError(FilesManagerError):
    """No session token, or the token does not resolve to an owner."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationError(FilesManagerError):
    """Malformed or missing input; the message names the offending field."""

    status_code = 400


class NotFoundError(FilesManagerError):
    """Missing record, record hidden from the requester, or missing blob."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class TypeMismatchError(FilesManagerError):
    """A folder was used where content is required."""

    status_code = 400


class JobError(FilesManagerError):
    """Worker-side failure. Reported to the queue, never to an HTTP caller."""


class MalformedIdError(ValueError):
    """Raised by the identifier parsers for values that are not ids."""
