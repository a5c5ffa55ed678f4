"""Common exception hierarchy for object store operations."""


class StorageError(Exception):
    """Base exception for all storage operations."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        bucket: str | None = None,
        cause: Exception | None = None,
    ):
        self.key = key
        self.bucket = bucket
        self.cause = cause
        super().__init__(message)


class StorageNotFoundError(StorageError):
    """Raised when a requested blob does not exist."""


class StoragePermissionError(StorageError):
    """Raised when credentials are invalid or access is denied."""


class StorageConnectionError(StorageError):
    """Raised when the storage service is unreachable."""


class StorageConfigError(StorageError):
    """Raised when the store configuration or credentials are invalid."""


class StorageNotInitializedError(StorageError):
    """Raised when an operation is attempted before init() succeeded."""
