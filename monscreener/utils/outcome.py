"""Result-like outcomes for isolated external calls.

Call sites that must not let an upstream failure cross a component boundary
wrap the awaitable with :func:`capture` and apply their documented default
with :meth:`Outcome.unwrap_or`.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, Optional, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """The value of a finished call or the error it raised."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Outcome[T]":
        return cls(error=error)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or ``default`` if the call failed."""
        if self.error is not None:
            return default
        return self.value

    def unwrap(self) -> T:
        """Return the value or re-raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value


async def capture(awaitable: Awaitable[T]) -> Outcome[T]:
    """
    Await ``awaitable`` and fold its result or error into an Outcome.

    Cancellation is not captured.
    """
    try:
        return Outcome.success(await awaitable)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        return Outcome.failure(e)
