"""Optional-style wrapper for return values."""

from __future__ import annotations

from collections.abc import Sized
from typing import Any, Callable, ClassVar, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class Result(Generic[T]):
    """Wraps a possibly missing return value.

    ``Result.of(None)`` always returns the same shared instance, so "no
    value" can be checked by identity::

        Result.of(lookup()).map(str.upper).when_null("n/a").value
    """

    __slots__ = ("_value",)

    _null: ClassVar[Result[Any]]

    def __init__(self, value: T | None) -> None:
        self._value = value

    @classmethod
    def of(cls, value: T | None) -> Result[T]:
        if value is None:
            return Result._null
        return cls(value)

    @property
    def value(self) -> T | None:
        return self._value

    def is_present(self) -> bool:
        """Return ``True`` if the value is not ``None``."""
        return self._value is not None

    def is_empty(self) -> bool:
        """Return ``True`` for ``None`` and zero-length strings or collections.

        Numbers are never empty, ``0`` included.
        """
        if self._value is None:
            return True
        if isinstance(self._value, Sized):
            return len(self._value) == 0
        return False

    def filter(self, predicate: Callable[[T], bool]) -> Result[T]:
        if self.is_present() and predicate(self._value):
            return self
        return Result._null

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        if self.is_present():
            return Result.of(mapper(self._value))
        return Result._null

    def when_null(self, other: T | None) -> Result[T]:
        if self.is_present():
            return self
        return Result.of(other)

    def apply_when_null(self, supplier: Callable[[], T | None]) -> Result[T]:
        if self.is_present():
            return self
        return Result.of(supplier())

    def when_empty(self, other: T | None) -> Result[T]:
        if not self.is_empty():
            return self
        return Result.of(other)

    def apply_when_empty(self, supplier: Callable[[], T | None]) -> Result[T]:
        if not self.is_empty():
            return self
        return Result.of(supplier())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Result):
            return bool(self._value == other._value)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"Result({self._value!r})"


Result._null = Result(None)
