class AbsenceTrackerError(Exception):
    """Base exception for absence tracking errors."""


class InvalidReason(AbsenceTrackerError, ValueError):
    """Raised when an absence is saved without a reason."""


class PersistenceWriteFailure(AbsenceTrackerError):
    """Raised when the persistence port could not store a blob.

    The in-memory change that triggered the write is kept.
    """

    def __init__(self, key: str, cause: Exception = None):
        super().__init__(f"Could not write '{key}': {cause}")
        self.key = key
        self.cause = cause


class PersistenceReadFailure(AbsenceTrackerError):
    """Raised when a stored blob cannot be decoded."""

    def __init__(self, key: str, cause: Exception = None):
        super().__init__(f"Could not read '{key}': {cause}")
        self.key = key
        self.cause = cause
