from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    @property
    def success(self) -> T:
        return self.value

    @property
    def failure(self) -> None:
        return None

    def map(self, fn: Callable[[T], U]) -> "Success[U]":
        return Success(fn(self.value))

    def flat_map(self, fn: Callable[[T], "Result[U, Any]"]) -> "Result[U, Any]":
        return fn(self.value)

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure(Generic[E]):
    """Failed outcome carrying the exception that caused it.

    The error is stored, never raised, until a caller asks for it via `unwrap`.
    """

    error: E

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    @property
    def success(self) -> None:
        return None

    @property
    def failure(self) -> E:
        return self.error

    def map(self, fn: Callable[[Any], Any]) -> "Failure[E]":
        return self

    def flat_map(self, fn: Callable[[Any], Any]) -> "Failure[E]":
        return self

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Success[T], Failure[E]]


def capture(fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Result[T, Exception]":
    """Call `fn` and wrap its return value or raised exception in a Result.

    Only `Exception` subclasses are captured; KeyboardInterrupt and friends
    propagate.
    """

    try:
        return Success(fn(*args, **kwargs))
    except Exception as e:
        return Failure(e)
