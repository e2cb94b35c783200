"""Explicit success/failure outcomes for vault operations."""

from dataclasses import dataclass
from typing import Generic, TypeVar, cast

from medvault.errors import UserError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Outcome of a vault operation: either a value or a UserError, never both.

    Vault services return results instead of raising so every failure path can be
    asserted on directly. The App facade calls unwrap() to turn a failure into the
    carried exception for the web layer.
    """

    value: T | None = None
    error: UserError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: UserError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return cast(T, self.value)
