"""
Result type for expected, user-facing failures.

Domain constructors and state transitions never raise for bad input; they
return a failed ``Result`` whose ``error`` is shown to the end user as-is.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an operation that can succeed with a value or fail with a message"""
    _value: Optional[T] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @property
    def value(self) -> T:
        if self.is_failure:
            raise ValueError(f"Cannot access value of a failed result: {self.error}")
        return self._value

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(_value=value)

    @classmethod
    def failure(cls, error: str, kind: ErrorKind = ErrorKind.VALIDATION) -> "Result[T]":
        if not error:
            raise ValueError("A failed result must have an error message")
        return cls(error=error, kind=kind)

    @classmethod
    def conflict(cls, error: str) -> "Result[T]":
        return cls.failure(error, ErrorKind.CONFLICT)

    @classmethod
    def not_found(cls, error: str) -> "Result[T]":
        return cls.failure(error, ErrorKind.NOT_FOUND)

    @classmethod
    def unauthorized(cls, error: str) -> "Result[T]":
        return cls.failure(error, ErrorKind.UNAUTHORIZED)

    def propagate(self) -> "Result":
        """Re-wrap a failure so it can be returned from a function with a different value type"""
        return Result(error=self.error, kind=self.kind)


def first_failure(*results: Result) -> Optional[Result]:
    """Return the first failed result, or None when all succeeded"""
    for result in results:
        if result.is_failure:
            return result
    return None
