"""Error types shared by the storage, git and index services."""


class ServiceError(Exception):
    """Base error for service operations. Maps to an internal server error."""

    error_code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """The caller supplied an argument the operation cannot accept."""

    error_code = "VALIDATION_ERROR"
    status_code = 400


class InvalidPathError(ValidationError):
    """A path is absolute, empty or tries to leave the storage root."""

    error_code = "INVALID_PATH"

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Invalid file path '{path}': contains invalid characters or attempts directory traversal"
        )
        self.path = path


class NotFoundError(ServiceError):
    """The requested file or repository does not exist."""

    error_code = "NOT_FOUND"
    status_code = 404


class GitError(ServiceError):
    """A git invocation exited non-zero, timed out or could not be started."""

    error_code = "GIT_ERROR"

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ConfigurationError(Exception):
    """The service cannot start with the current settings."""
