"""Error taxonomy shared by the core, adapters and board."""


class TaskDashError(Exception):
    """Base class for every failure the board knows how to surface."""

    kind = "error"
    retryable = True


class ConfigurationError(TaskDashError):
    """Raised when a required setting (e.g. the API base URL) is missing."""

    kind = "configuration"
    retryable = False


class NetworkError(TaskDashError):
    """Raised when the task API cannot be reached."""

    kind = "network"


class ApiError(TaskDashError):
    """Raised when the task API answers with a non-success status."""

    kind = "api"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ApiError):
    """Raised when signing in or obtaining/verifying a token fails."""

    kind = "auth"


class InvalidTaskData(TaskDashError):
    """Raised when a wire-form task record cannot be converted."""

    kind = "invalid_data"

    def __init__(self, message: str, record: dict | None = None):
        super().__init__(message)
        self.record = record
