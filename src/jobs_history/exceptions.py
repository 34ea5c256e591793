"""Custom exceptions for jobs_history."""


class JobsHistoryError(Exception):
    """Base exception for all jobs_history errors."""
    pass


class ConfigurationError(JobsHistoryError):
    """Raised when configuration is invalid."""
    pass


class HistoryFetchError(JobsHistoryError):
    """Raised when the job runner history endpoint cannot be read."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PreferencesError(JobsHistoryError):
    """Raised when preferences cannot be written to local storage."""
    pass
