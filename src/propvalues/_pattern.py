"""Regular expression predicate.

``Pattern`` checks whether a string is matched by a regular expression and
turns engine failures into ``PatternMatchFailed`` with a readable reason.
Expressions may be given in PCRE delimiter form (``/^[a-z]+$/i``) or as a
plain Python regex (``^[a-z]+$``).
"""

from __future__ import annotations

import re
from typing import Any

from ._types import InvalidArgumentError, PatternMatchFailed, type_of

_DELIMITERS = frozenset("/#~%@!")

_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,  # str patterns are always unicode aware
}

# Failure kind -> message.
_ERRORS = {
    "invalid": "invalid regular expression",
    "internal": "internal regex engine error",
    "recursion_limit": "recursion limit exhausted",
    "bad_utf8": "malformed UTF-8 data",
    "bad_utf8_offset": "did not end at valid UTF-8 codepoint",
}


def _split_delimited(regex: str) -> tuple[str, int] | None:
    """Return ``(expression, flags)`` for delimiter form, ``None`` otherwise."""
    if len(regex) < 2 or regex[0] not in _DELIMITERS:
        return None

    end = regex.rfind(regex[0])
    if end == 0:
        return None

    modifiers = regex[end + 1 :]
    flags = 0
    for modifier in modifiers:
        if modifier not in _FLAGS:
            raise re.error(f"unknown modifier {modifier!r}")
        flags |= _FLAGS[modifier]

    return regex[1:end], flags


def _failure_kind(exc: BaseException) -> str | None:
    if isinstance(exc, re.error):
        return "invalid"
    if isinstance(exc, RecursionError):
        return "recursion_limit"
    if isinstance(exc, MemoryError):
        return "internal"
    if isinstance(exc, UnicodeDecodeError):
        if exc.reason == "unexpected end of data":
            return "bad_utf8_offset"
        return "bad_utf8"
    return None


class Pattern:
    """Predicate checking that a value complies with a regular expression.

    The expression is compiled lazily on first use, so an invalid expression
    is reported by ``matches()`` and not by the constructor.
    """

    __slots__ = ("_pattern",)

    def __init__(self, regex: str) -> None:
        self._pattern = regex

    @property
    def pattern(self) -> str:
        return self._pattern

    def matches(self, value: Any) -> bool:
        """Return ``True`` if *value* is matched by the expression.

        ``bytes`` are decoded as UTF-8 before matching.

        Raises:
            InvalidArgumentError: *value* is neither ``str`` nor ``bytes``.
            PatternMatchFailed: the engine failed to evaluate the expression.
        """
        if not isinstance(value, (str, bytes)):
            raise InvalidArgumentError(
                f'Given value of type "{type_of(value)}" can not be matched'
                " against a regular expression."
            )

        try:
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            delimited = _split_delimited(self._pattern)
            if delimited is None:
                compiled = re.compile(self._pattern)
            else:
                compiled = re.compile(*delimited)
            return compiled.search(value) is not None
        except (re.error, RecursionError, MemoryError, OverflowError, UnicodeDecodeError) as exc:
            raise PatternMatchFailed(self._pattern, self._message_for(exc)) from exc

    @staticmethod
    def _message_for(exc: BaseException) -> str:
        kind = _failure_kind(exc)
        if kind is not None:
            return _ERRORS[kind]
        return f"Unknown error: {exc}"

    def __repr__(self) -> str:
        return f"Pattern({self._pattern!r})"


def pattern(regex: str) -> Pattern:
    """Shortcut for ``Pattern(regex)``."""
    return Pattern(regex)
