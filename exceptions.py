"""
Errors raised by the job services. The router maps them to HTTP responses.
"""


class JobTrackerError(Exception):
    """Base class for all job tracker errors."""


class ValidationError(JobTrackerError):
    """Required input fields are missing or empty."""


class NotFoundError(JobTrackerError):
    """No job exists for the given id."""

    def __init__(self, message="Job not found"):
        super().__init__(message)


class InvalidStateError(JobTrackerError):
    """The operation is not allowed in the job's current status."""

    def __init__(self, message, status=None):
        self.status = status
        super().__init__(message)


class NotificationError(JobTrackerError):
    """The completion webhook could not be delivered."""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class ConfigurationError(JobTrackerError):
    """A required setting, such as the webhook URL, is missing."""
