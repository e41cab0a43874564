"""Ok / Err results for expected failures.

Command handlers return a Result rather than raising when a request
cannot be honoured (nothing to stop, ambiguous selector, storage error).
The shell decides how each failure is shown.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E


# Using Union here as TypeVar aliases don't work with | syntax at runtime
Result = Union[Ok[T], Err[E]]  # noqa: UP007


def flat_map(result: Ok[T] | Err[E], fn: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
    """Feed an Ok value into ``fn``; pass an Err through untouched."""
    if isinstance(result, Ok):
        return fn(result.value)
    return result
