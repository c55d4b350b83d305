"""Result pattern for host completions.

Host adapters signal completion exactly once with either a Success or a
Failure instead of raising into the transport layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Completed host operation."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Host operation that signalled failure."""

    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raise error when unwrapping failure."""
        raise ValueError(f"Cannot unwrap Failure: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default


Result = Success[T] | Failure[E]


def ok(value: T) -> Success[T]:
    """Create a Success result."""
    return Success(value)


def err(error: E) -> Failure[E]:
    """Create a Failure result."""
    return Failure(error)
