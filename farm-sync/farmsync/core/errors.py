# farmsync/core/errors.py
"""Error kinds raised by the domain services.

Each error carries the HTTP status it maps to and a message that is safe to
show a client. Driver-level detail stays in the server logs.
"""


class FarmSyncError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FarmSyncError):
    """A required field is missing or malformed. Raised before any write."""

    status_code = 400


class NotFoundError(FarmSyncError):
    status_code = 404


class ConflictError(FarmSyncError):
    """Reserved for optimistic-concurrency checks; nothing raises it yet."""

    status_code = 409


class StorageError(FarmSyncError):
    """The database failed to execute a read, write or transaction."""

    status_code = 500
