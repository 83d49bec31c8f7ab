# dweetr/core/errors.py


class DweetError(Exception):
    """Base class for errors surfaced to callers as a structured failure."""

    message = "Internal error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(DweetError):
    """Request is missing a thing name or carries no payload."""


class RateLimited(DweetError):
    """Client published more often than the configured limit allows."""


class StorageUnavailable(DweetError):
    """The database could not be reached or a statement failed.

    The message is fixed so that driver details never reach the caller;
    the original exception is kept as ``__cause__`` for the logs.
    """

    message = "Database connection failed"

    def __init__(self):
        super().__init__(self.message)
