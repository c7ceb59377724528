"""Explicit success/failure values for callers that do not want exceptions."""

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

from panj_granth.errors import ErrorKind, GurbaniError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful outcome."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """A failed outcome."""

    kind: ErrorKind
    message: str
    retryable: bool = False
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_exception(cls, error: Exception) -> "Err":
        """Describe an exception as an Err. Unexpected exceptions map to UNKNOWN."""
        if isinstance(error, GurbaniError):
            return cls(
                kind=error.kind,
                message=error.message,
                retryable=error.retryable,
                status_code=getattr(error, "status_code", None),
            )
        return cls(kind=ErrorKind.UNKNOWN, message=str(error) or "Unknown error occurred")


Outcome = Ok[T] | Err


async def attempt(awaitable: Awaitable[T]) -> Outcome[T]:
    """Await and wrap the result, turning any Exception into an Err."""
    try:
        return Ok(await awaitable)
    except Exception as e:
        return Err.from_exception(e)
