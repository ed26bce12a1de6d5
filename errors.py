class AttendanceError(Exception):
    """Base exception for record store and mutation failures."""


class NotFound(AttendanceError):
    """Raised when a student or section lookup misses."""


class DuplicateKey(AttendanceError):
    """Raised when a unique business id is already taken."""


class StorageUnavailable(AttendanceError):
    """Raised when the database is not configured or a query faults."""


class ValidationMissing(AttendanceError):
    """Raised when a required field is absent or malformed."""


class SeedNotConfirmed(AttendanceError):
    """Raised when a destructive reset is attempted without confirmation."""


class ApiError(Exception):
    """Raised by the dashboard client for any non-2xx answer or transport failure."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class NoDataToExport(Exception):
    """Raised when an export is requested for an empty row set."""
