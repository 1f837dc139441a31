"""Typed failures raised by the file repository core."""


class FileServiceError(Exception):
    """Base class for all file repository errors."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class InvalidPathError(FileServiceError):
    """Raised when a client path would leave the sandbox root."""


class NotFoundError(FileServiceError):
    """Raised when the path is not the kind of entry the operation needs."""


class ConflictError(FileServiceError):
    """Raised when an upload targets an existing file."""


class UnsupportedMediaTypeError(FileServiceError):
    """Raised when text contents are written to a non-text file."""

    def __init__(self, extension: str, path: str | None = None) -> None:
        self.extension = extension
        super().__init__(f"PUT can only update text files, not: {extension or '(none)'}", path)


class ValidationError(FileServiceError):
    """Raised when a required payload is missing."""


class StorageError(FileServiceError):
    """Raised for any other filesystem failure."""
