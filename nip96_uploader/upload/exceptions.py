class MediaClientError(Exception):
    """Base exception for upload and deletion failures."""


class ResponseParseError(MediaClientError):
    """Raised when a server response body does not have the expected shape."""


class UploadRejectedError(MediaClientError):
    """Raised when the server declines an upload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ProcessingIncompleteError(MediaClientError):
    """Raised when processing ends without a final asset."""


class ProcessingTimeoutError(MediaClientError):
    """Raised when processing does not finish within the configured number of polls."""


class UploadCancelledError(MediaClientError):
    """Raised when the caller cancels an upload while it waits on processing."""


class MissingMediaUrlError(MediaClientError):
    """Raised when a successful upload carries no usable url tag."""


class DeletionError(MediaClientError):
    """Raised when the server declines a deletion."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
