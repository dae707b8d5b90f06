"""Parse strings into typed values.

``to_type()`` guesses the type of a string by running an ordered chain of
recognizers; the ``to_*`` functions convert to one specific type; ``Parse``
wraps a single value for fluent conversion with a fallback default::

    to_type("303")                           # 303
    to_type("[foo:bar|baz]")                 # {"foo": "bar", 0: "baz"}
    Parse(None).defaulting_to(80).as_int()   # 80

Class and constant lookups go through an explicit ``Symbols`` registry
instead of importing arbitrary names.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from pydantic import TypeAdapter, ValidationError

from ._types import ClassNotFoundError, DefaultTypeMismatch, type_of

logger = logging.getLogger(__name__)

SEPARATOR_LIST = "|"

Recognizer = Callable[[str], Any]

_BOOLEAN_TRUE = frozenset({"yes", "true", "on"})
_BOOLEAN_FALSE = frozenset({"no", "false", "off"})

_INT = re.compile(r"^[+-]?[0-9]+$")
_FLOAT = re.compile(r"^[+-]?[0-9]+\.[0-9]+$")
_NUMBER = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)$")
_INT_PREFIX = re.compile(r"^\s*[+-]?[0-9]+")
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")
_INT_KEY = re.compile(r"^(0|-?[1-9][0-9]*)$")

_NAME = r"[A-Za-z_][A-Za-z0-9_\\]*"
_CLASSNAME = re.compile(rf"^({_NAME})::class$")
_CLASS = re.compile(rf"^({_NAME})\.class")


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

_MISSING = object()


class Symbols:
    """Names that ``to_class``, ``to_classname`` and ``to_type`` may resolve.

    Classes are registered explicitly, optionally under a custom name::

        @default_symbols.register_class
        class Binford: ...

        to_classname("Binford::class")  # "Binford"

    ``Name::ATTR`` resolves as a constant when ``Name`` is a registered class
    with a public, non-callable attribute ``ATTR``.
    """

    def __init__(self) -> None:
        self._classes: dict[str, type] = {}
        self._constants: dict[str, Any] = {}

    def register_class(self, cls: type, name: str | None = None) -> type:
        self._classes[name or cls.__name__] = cls
        return cls

    def class_exists(self, name: str) -> bool:
        return name in self._classes

    def class_for(self, name: str) -> type:
        try:
            return self._classes[name]
        except KeyError:
            raise ClassNotFoundError(name) from None

    def define_constant(self, name: str, value: Any) -> None:
        self._constants[name] = value

    def is_defined(self, name: str) -> bool:
        if name in self._constants:
            return True
        return self._class_constant(name) is not _MISSING

    def constant(self, name: str) -> Any:
        if name in self._constants:
            return self._constants[name]
        found = self._class_constant(name)
        if found is _MISSING:
            raise KeyError(name)
        return found

    def _class_constant(self, name: str) -> Any:
        classname, separator, attribute = name.partition("::")
        if not separator or attribute.startswith("_") or classname not in self._classes:
            return _MISSING
        found = getattr(self._classes[classname], attribute, _MISSING)
        if callable(found):
            return _MISSING
        return found


default_symbols = Symbols()
for _builtin in (bool, bytes, dict, float, int, list, object, set, str, tuple):
    default_symbols.register_class(_builtin)
del _builtin


# ---------------------------------------------------------------------------
# Typed conversions
# ---------------------------------------------------------------------------


def to_int(string: str | None) -> int | None:
    """Parse the leading integer of *string*; ``"80foo"`` gives ``80``.

    Strings without a numeric prefix give ``0``.
    """
    if string is None:
        return None

    match = _INT_PREFIX.match(string)
    return int(match.group()) if match else 0


def to_float(string: str | None) -> float | None:
    """Parse the leading number of *string* as float, ``0.0`` without one."""
    if string is None:
        return None

    match = _FLOAT_PREFIX.match(string)
    return float(match.group()) if match else 0.0


def to_bool(string: str | None) -> bool:
    """Return ``True`` for "yes", "true" and "on" (any case).

    Unlike ``to_int`` and ``to_float`` this returns ``False`` for ``None``.
    """
    if string is None:
        return False

    return string.lower() in _BOOLEAN_TRUE


def _remove_brackets(string: str) -> str:
    if string.startswith("[") and string.endswith("]"):
        return string[1:-1]
    return string


def to_list(string: str | None, separator: str = SEPARATOR_LIST) -> list[str] | None:
    """Split *string* at *separator* after removing enclosing brackets.

    >>> to_list("[foo|bar|baz]")
    ['foo', 'bar', 'baz']
    """
    if string is None:
        return None

    content = _remove_brackets(string)
    if content == "":
        return []

    if separator and separator in content:
        return content.split(separator)

    return [content]


def _map_key(key: str) -> str | int:
    # integer-looking keys share the numbering of unkeyed entries
    if _INT_KEY.match(key):
        return int(key)
    return key


def to_map(string: str | None) -> dict[str | int, str] | None:
    """Parse *string* into a map.

    Entries are separated by ``|`` and split at the first ``:`` into key and
    value. Entries without ``:`` are appended under the next free integer
    key, so ``"foo:bar|baz"`` gives ``{"foo": "bar", 0: "baz"}``.
    """
    if string is None:
        return None
    if string == "":
        return {}

    result: dict[str | int, str] = {}
    next_index = 0
    for entry in to_list(string) or []:
        key: str | int
        if ":" in entry:
            raw_key, entry_value = entry.split(":", 1)
            key = _map_key(raw_key)
        else:
            key, entry_value = next_index, entry

        result[key] = entry_value
        if isinstance(key, int) and key >= next_index:
            next_index = key + 1

    return result


def _number(text: str) -> int | float | None:
    if _INT.match(text):
        return int(text)
    if _NUMBER.match(text):
        return float(text)
    return None


def _steps(start: int | float, stop: int | float) -> list[int | float]:
    step = 1 if stop >= start else -1
    count = int(abs(stop - start)) + 1
    return [start + index * step for index in range(count)]


def to_range(string: str | None) -> list[Any] | None:
    """Expand ``"min..max"`` into an inclusive list.

    Works on integers, on floats (step 1.0) and on single characters, in
    either direction: ``"5..1"`` gives ``[5, 4, 3, 2, 1]``, ``"a..c"`` gives
    ``["a", "b", "c"]``. A missing side gives an empty list.
    """
    if string is None:
        return None
    if string == "" or ".." not in string:
        return []

    low, high = string.split("..", 1)
    if low == "" or high == "":
        return []

    start, stop = _number(low), _number(high)
    if start is None and stop is None:
        return [chr(code) for code in _steps(ord(low[0]), ord(high[0]))]

    # a non-numeric bound next to a numeric one counts as zero
    start = 0 if start is None else start
    stop = 0 if stop is None else stop
    if isinstance(start, float) or isinstance(stop, float):
        return [float(item) for item in _steps(start, stop)]

    return _steps(start, stop)


def to_class(string: str | None, symbols: Symbols | None = None) -> type | None:
    """Resolve ``"Name.class"`` to the class registered as ``Name``.

    ``Name`` may contain letters, digits, ``_`` and ``\\`` but no dots, so
    ``"com.example.class"`` does not have that form. Only the start of
    *string* is checked: ``"Name.classic"`` resolves ``Name`` as well.
    Returns ``None`` when *string* does not have that form.

    Raises:
        ClassNotFoundError: the form matches but no class is registered.
    """
    if not string:
        return None

    match = _CLASS.match(string)
    if match is None:
        return None

    registry = symbols if symbols is not None else default_symbols
    return registry.class_for(match.group(1))


def to_classname(string: str | None, symbols: Symbols | None = None) -> str | None:
    """Return ``Name`` for ``"Name::class"`` if such a class is registered."""
    if not string:
        return None

    match = _CLASSNAME.match(string)
    if match is None:
        return None

    registry = symbols if symbols is not None else default_symbols
    if registry.class_exists(match.group(1)):
        return match.group(1)
    return None


# ---------------------------------------------------------------------------
# Recognitions
# ---------------------------------------------------------------------------


def _recognize_true(string: str) -> bool | None:
    return True if to_bool(string) else None


def _recognize_false(string: str) -> bool | None:
    return False if string.lower() in _BOOLEAN_FALSE else None


def _recognize_int(string: str) -> int | None:
    return to_int(string) if _INT.match(string) else None


def _recognize_float(string: str) -> float | None:
    return to_float(string) if _FLOAT.match(string) else None


def _recognize_array(string: str) -> Any:
    if string.startswith("[") and string.endswith("]"):
        return to_map(string) if ":" in string else to_list(string)
    return None


def _recognize_range(string: str) -> list[Any] | None:
    return to_range(string) if ".." in string else None


class Recognitions:
    """Ordered chain of named recognizers used by ``to_type()``.

    A recognizer takes a string and returns the recognized value, or
    ``None`` to let the next recognizer try.
    """

    def __init__(self, symbols: Symbols | None = None) -> None:
        self._symbols = symbols if symbols is not None else default_symbols
        self._chain: dict[str, Recognizer] = {}
        self.reset()

    def _builtin(self) -> list[tuple[str, Recognizer]]:
        symbols = self._symbols

        def recognize_constant(string: str) -> Any:
            return symbols.constant(string) if symbols.is_defined(string) else None

        return [
            ("booleanTrue", _recognize_true),
            ("booleanFalse", _recognize_false),
            ("int", _recognize_int),
            ("float", _recognize_float),
            ("array", _recognize_array),
            ("range", _recognize_range),
            ("classname", lambda string: to_classname(string, symbols)),
            ("class", lambda string: to_class(string, symbols)),
            ("constant", recognize_constant),
        ]

    def reset(self) -> None:
        """Restore the built-in recognizers and drop all added ones."""
        self._chain = dict(self._builtin())

    def add(self, name: str, recognizer: Recognizer) -> None:
        """Append *recognizer*, or replace the one named *name* in place."""
        self._chain[name] = recognizer
        logger.debug("Registered recognizer %r", name)

    def remove(self, name: str) -> bool:
        """Remove the recognizer named *name*; ``False`` if there was none."""
        if name not in self._chain:
            return False
        del self._chain[name]
        logger.debug("Removed recognizer %r", name)
        return True

    def names(self) -> list[str]:
        return list(self._chain)

    def recognize(self, string: str) -> Any:
        for recognizer in self._chain.values():
            recognized = recognizer(string)
            if recognized is not None:
                return recognized
        return None

    def __contains__(self, name: object) -> bool:
        return name in self._chain


default_recognitions = Recognitions()


def to_type(string: Any, recognitions: Recognitions | None = None) -> Any:
    """Convert *string* to the type its content looks like.

    ``None`` and ``"null"`` give ``None``. Otherwise the recognizers run in
    order: booleans, int, float, ``[list]``/``[map]``, ranges,
    ``Name::class``, ``Name.class`` and registered constants. A string
    nobody recognizes is returned unchanged.
    """
    if string is None:
        return None
    if not isinstance(string, str):
        string = str(string)
    if string.lower() == "null":
        return None

    chain = recognitions if recognitions is not None else default_recognitions
    recognized = chain.recognize(string)
    return string if recognized is None else recognized


# ---------------------------------------------------------------------------
# Fluent parser
# ---------------------------------------------------------------------------

_DEFAULT_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    "as_int": TypeAdapter(Optional[int]),
    "as_float": TypeAdapter(Optional[float]),
    "as_bool": TypeAdapter(Optional[bool]),
    "as_list": TypeAdapter(Optional[list]),
    "as_map": TypeAdapter(Optional[dict]),
    "as_range": TypeAdapter(Optional[list]),
    "as_class": TypeAdapter(Optional[type[Any]]),
    "as_classname": TypeAdapter(Optional[str]),
}


class Parse:
    """Fluent parser for one value with a default for ``None``.

    Example::

        port = Parse(properties.value("net", "port")).defaulting_to(80).as_int()

    The default is returned as is, not converted. It must fit the type of the
    accessor, otherwise ``DefaultTypeMismatch`` is raised.
    """

    __slots__ = ("_value", "_default", "_symbols")

    def __init__(
        self,
        value: Any,
        default: Any = None,
        *,
        symbols: Symbols | None = None,
    ) -> None:
        self._value = value if value is None or isinstance(value, str) else str(value)
        self._default = default
        self._symbols = symbols

    def defaulting_to(self, default: Any) -> Parse:
        self._default = default
        return self

    def _checked_default(self, accessor: str) -> Any:
        try:
            _DEFAULT_ADAPTERS[accessor].validate_python(self._default, strict=True)
        except ValidationError as exc:
            raise DefaultTypeMismatch(
                f"Default of type {type_of(self._default)} can not be returned from {accessor}()."
            ) from exc
        return self._default

    def _parse(self, accessor: str, convert: Callable[..., Any], *args: Any) -> Any:
        if self._value is None:
            return self._checked_default(accessor)
        return convert(self._value, *args)

    def as_string(self) -> str | None:
        if self._value is None:
            return None if self._default is None else str(self._default)
        return self._value

    def as_int(self) -> int | None:
        return self._parse("as_int", to_int)

    def as_float(self) -> float | None:
        return self._parse("as_float", to_float)

    def as_bool(self) -> bool | None:
        return self._parse("as_bool", to_bool)

    def as_list(self, separator: str = SEPARATOR_LIST) -> list[str] | None:
        return self._parse("as_list", to_list, separator)

    def as_map(self) -> dict[str | int, str] | None:
        return self._parse("as_map", to_map)

    def as_range(self) -> list[Any] | None:
        return self._parse("as_range", to_range)

    def as_class(self) -> type | None:
        return self._parse("as_class", to_class, self._symbols)

    def as_classname(self) -> str | None:
        return self._parse("as_classname", to_classname, self._symbols)

    def __repr__(self) -> str:
        return f"Parse({self._value!r})"
