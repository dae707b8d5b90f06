"""Value wrapper with predicate methods.

``Value`` wraps an arbitrary value and answers questions about it. Besides
the fixed predicates, named checks can be registered in a ``Checks``
registry and invoked with ``Value.check()``::

    Value.define_check("is_port", lambda v: isinstance(v, int) and 0 < v < 65536)
    value(8080).check("is_port")  # True
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any, Callable, ClassVar, Generic, TypeVar

from ._pattern import Pattern
from ._types import InvalidArgumentError, NoSuchCheckError

T = TypeVar("T")

_SCALARS = (bool, int, float, str)
_COLLECTIONS = (list, tuple, set, frozenset)
_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


# ---------------------------------------------------------------------------
# Built-in checks
# ---------------------------------------------------------------------------


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and _NUMERIC.match(value) is not None


def _is_iterable(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes))


_BUILTIN_CHECKS: dict[str, Callable[..., bool]] = {
    "is_int": _is_int,
    "is_integer": _is_int,
    "is_float": lambda value: isinstance(value, float),
    "is_string": lambda value: isinstance(value, str),
    "is_bool": lambda value: isinstance(value, bool),
    "is_numeric": _is_numeric,
    "is_scalar": lambda value: isinstance(value, _SCALARS),
    "is_list": lambda value: isinstance(value, (list, tuple)),
    "is_dict": lambda value: isinstance(value, Mapping),
    "is_null": lambda value: value is None,
    "is_callable": callable,
    "is_iterable": _is_iterable,
}


class Checks:
    """Registry of named checks usable through ``Value.check()``.

    Built-in checks are always available and can not be redefined.
    """

    def __init__(self) -> None:
        self._checks: dict[str, Callable[..., bool]] = {}

    def define(self, name: str, predicate: Callable[..., bool]) -> None:
        """Register *predicate* under *name*, replacing an earlier custom one.

        The predicate receives the wrapped value followed by any extra
        arguments passed to ``Value.check()``.
        """
        if name in _BUILTIN_CHECKS:
            raise InvalidArgumentError(f"Can not overwrite built-in check {name}().")
        self._checks[name] = predicate

    def lookup(self, name: str) -> Callable[..., bool] | None:
        if name in self._checks:
            return self._checks[name]
        return _BUILTIN_CHECKS.get(name)

    def reset(self) -> None:
        """Forget all custom checks."""
        self._checks.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._checks or name in _BUILTIN_CHECKS


default_checks = Checks()


# ---------------------------------------------------------------------------
# Value
# ---------------------------------------------------------------------------


def _strictly_equal(left: Any, right: Any) -> bool:
    if left is right:
        return True
    return type(left) is type(right) and bool(left == right)


def _elements(collection: Any) -> Iterable[Any]:
    if isinstance(collection, Mapping):
        return collection.values()
    return collection


def _is_in(candidate: Any, allowed: Iterable[Any], strict: bool) -> bool:
    if strict:
        return any(_strictly_equal(candidate, item) for item in allowed)
    return any(candidate == item for item in allowed)


class Value(Generic[T]):
    """Wraps a value to run checks against it."""

    __slots__ = ("_value",)

    _null: ClassVar[Value[Any]]

    def __init__(self, value: T | None) -> None:
        self._value = value

    @classmethod
    def of(cls, value: T | None) -> Value[T]:
        if value is None:
            return Value._null
        return cls(value)

    @property
    def value(self) -> T | None:
        return self._value

    def is_null(self) -> bool:
        return self._value is None

    def is_empty(self) -> bool:
        """Return ``True`` for ``None``, ``""`` and empty collections."""
        if self._value is None:
            return True
        if isinstance(self._value, (str, bytes, Mapping) + _COLLECTIONS):
            return len(self._value) == 0
        return False

    def contains(self, needle: Any) -> bool:
        """Check that *needle* is contained in the value.

        Strings are searched for ``str(needle)``, other iterables for an
        element strictly equal to *needle*. A ``None`` value only contains
        ``None``.
        """
        if self._value is None:
            return needle is None

        if isinstance(self._value, str):
            return str(needle) in self._value

        if isinstance(self._value, Iterable):
            return any(_strictly_equal(element, needle) for element in _elements(self._value))

        return False

    def contains_any_of(self, candidates: Iterable[Any]) -> bool:
        """Check that the value contains at least one of *candidates*.

        Only scalar values are searched. Boolean candidates must be the
        identical value, other candidates match by strict equality or, for
        string values, as a substring.
        """
        if self._value is None or not isinstance(self._value, _SCALARS):
            return False

        for needle in candidates:
            if isinstance(needle, bool):
                if self._value is needle:
                    return True
            elif _strictly_equal(self._value, needle):
                return True
            elif isinstance(self._value, str) and str(needle) in self._value:
                return True

        return False

    def equals(self, expected: Any) -> bool:
        """Strictly compare the value with a scalar or ``None``."""
        if expected is not None and not isinstance(expected, _SCALARS):
            raise InvalidArgumentError("Can only compare scalar values and None.")
        return _strictly_equal(expected, self._value)

    def is_one_of(self, allowed: Iterable[Any], strict: bool = False) -> bool:
        """Check that the value, or every element of it, is in *allowed*."""
        allowed = list(allowed)
        if not isinstance(self._value, (Mapping,) + _COLLECTIONS):
            return _is_in(self._value, allowed, strict)

        return all(_is_in(element, allowed, strict) for element in _elements(self._value))

    def is_matched_by(self, regex: str) -> bool:
        return Pattern(regex).matches(self._value)

    def satisfies(self, predicate: Callable[[Any], bool]) -> bool:
        return bool(predicate(self._value))

    def check(self, name: str, *args: Any, checks: Checks | None = None) -> bool:
        """Run the check registered as *name* against the value.

        Raises:
            NoSuchCheckError: no custom or built-in check has that name.
        """
        registry = checks if checks is not None else default_checks
        predicate = registry.lookup(name)
        if predicate is None:
            raise NoSuchCheckError(f"Method {type(self).__name__}.{name}() does not exist.")
        return bool(predicate(self._value, *args))

    @staticmethod
    def define_check(name: str, predicate: Callable[..., bool]) -> None:
        """Register a check in the default registry."""
        default_checks.define(name, predicate)

    def __repr__(self) -> str:
        return f"Value({self._value!r})"


Value._null = Value(None)


def value(v: T | None) -> Value[T]:
    """Shortcut for ``Value.of(v)``."""
    return Value.of(v)
