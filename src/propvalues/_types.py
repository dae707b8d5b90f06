"""Foundation types for propvalues.

Provides the exception hierarchy shared by all components and the
``type_of`` helper used to describe offending values in error messages.
"""

from __future__ import annotations

from typing import Any


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PropValuesError(Exception):
    """Base exception for all propvalues errors."""


class InvalidArgumentError(PropValuesError, ValueError):
    """Raised when a caller passes malformed or disallowed input."""


class LogicError(PropValuesError, RuntimeError):
    """Raised when an operation is not allowed in the current state."""


class PropertiesFormatError(PropValuesError, ValueError):
    """Raised when a properties file contains malformed INI content."""


class PatternMatchFailed(PropValuesError, RuntimeError):
    """Raised when the regex engine fails while evaluating a pattern."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f'Failure while matching "{pattern}", reason: {reason}.')


class ClassNotFoundError(PropValuesError, LookupError):
    """Raised when a class handle is requested for an unregistered name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Class "{name}" does not exist.')


class NoSuchCheckError(PropValuesError, AttributeError):
    """Raised when a check is invoked that was never defined."""


class DefaultTypeMismatch(PropValuesError, TypeError):
    """Raised when a parse default does not fit the requested type."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def type_of(value: Any) -> str:
    """Return a readable type name for *value*.

    Builtins are reported by their bare name (``int``, ``NoneType``), other
    classes by their module-qualified name.

    >>> type_of(303)
    'int'
    """
    cls = type(value)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"
