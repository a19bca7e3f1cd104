"""
Build outcome values.

`build_index` hands back Ok(BuildOutput) or Err(FatalBuildError) instead of
raising, and the explorer threads that value straight into the reload
event. The previous snapshot is only replaced when an Ok arrives.
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self):
        raise ValueError(f"Called unwrap_err on Ok: {self.value!r}")


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_err(self) -> E:
        return self.error


Result = Union[Ok[T], Err[E]]


def map_ok(result: Result[T, E], func: Callable[[T], U]) -> Result[U, E]:
    """Transform an Ok value; an Err passes through untouched."""
    if isinstance(result, Ok):
        return Ok(func(result.value))
    return result  # type: ignore
