"""Error taxonomy for content fetching and caching."""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a failure, as surfaced to callers."""

    INVALID_REQUEST = "invalid_request"
    TIMEOUT = "timeout"
    REMOTE = "remote"
    CACHE_CORRUPTION = "cache_corruption"
    UNKNOWN = "unknown"


class GurbaniError(Exception):
    """Base class for every error raised by this package."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    retryable: bool = False

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(GurbaniError):
    """Bad caller input. Retrying without changing the input will not help."""

    kind = ErrorKind.INVALID_REQUEST


class RequestTimeoutError(GurbaniError):
    """The remote API did not answer within the request timeout."""

    kind = ErrorKind.TIMEOUT
    retryable = True

    def __init__(self, message: str = "Request timed out") -> None:
        super().__init__(message)


class RemoteError(GurbaniError):
    """Server, transport or payload failure reported by the remote API."""

    kind = ErrorKind.REMOTE
    retryable = True

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CacheCorruptionError(GurbaniError):
    """A persisted cache payload could not be decoded. Never leaves the cache."""

    kind = ErrorKind.CACHE_CORRUPTION


class UnknownError(GurbaniError):
    """Wrapper for unexpected failures."""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str = "Unknown error occurred") -> None:
        super().__init__(message)
