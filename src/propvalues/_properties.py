"""INI-backed properties.

``Properties`` maps section names to key/value mappings. Values are kept as
they were read and only converted on request via ``parse_value()`` or
``parse()``. Values of keys ending in ``password`` are wrapped into
``Secret`` instances when the properties are created::

    props = Properties.from_string("[db]\\nhost=localhost\\nport=5432\\npassword=hunter2")
    props.parse_value("db", "port")      # 5432
    props.value("db", "password")        # Secret('***')
"""

from __future__ import annotations

import configparser
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from ._parse import Parse, to_type
from ._secret import Secret
from ._types import InvalidArgumentError, LogicError, PropertiesFormatError

logger = logging.getLogger(__name__)

PASSWORD_SUFFIX = "password"

# configparser merges its default section into every other section; INI
# files read here have no such section, so it gets a name no header uses.
_NO_DEFAULT_SECTION = "\x00propvalues-default"


def _parse_ini(text: str) -> dict[str, dict[str, str]]:
    parser = configparser.ConfigParser(
        delimiters=("=",),
        interpolation=None,
        strict=False,
        default_section=_NO_DEFAULT_SECTION,
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    parser.read_string(text)
    return {
        section: dict(parser.items(section, raw=True)) for section in parser.sections()
    }


def _secure(value: Any) -> Secret:
    if value is None or isinstance(value, (str, Secret)):
        return Secret.create(value)
    return Secret.create(str(value))


class Properties:
    """Read-only sections of key/value pairs.

    Iterating yields ``(section_name, section)`` pairs in insertion order,
    so ``dict(props)`` gives a plain nested dict.
    """

    def __init__(self, data: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._data: dict[str, dict[str, Any]] = {}
        for section, values in (data or {}).items():
            self._data[section] = {
                key: _secure(value)
                if isinstance(key, str) and key.endswith(PASSWORD_SUFFIX)
                else value
                for key, value in values.items()
            }

    # -- construction -------------------------------------------------------

    @classmethod
    def from_string(cls, text: str) -> Properties:
        """Create properties from INI formatted *text*.

        Raises:
            InvalidArgumentError: *text* is not valid INI.
        """
        try:
            data = _parse_ini(text)
        except configparser.Error as exc:
            raise InvalidArgumentError(
                f"Property string contains errors and can not be parsed: {exc}"
            ) from exc

        return cls(data)

    @classmethod
    def from_file(cls, path: str | Path) -> Properties:
        """Create properties from the INI file at *path*.

        Raises:
            InvalidArgumentError: the file does not exist or can not be read.
            PropertiesFormatError: the file is not valid INI.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidArgumentError(f"Property file {path} not found") from exc
        except UnicodeDecodeError as exc:
            raise InvalidArgumentError(
                f"Property file {path} can not be read as UTF-8: {exc.reason}"
            ) from exc

        try:
            data = _parse_ini(text)
        except configparser.Error as exc:
            raise PropertiesFormatError(
                f"Property file at {path} contains errors and can not be parsed: {exc}"
            ) from exc

        logger.debug("Loaded %d sections from %s", len(data), path)
        return cls(data)

    def merge(self, other: Properties) -> Properties:
        """Return new properties with the sections of *other* taking precedence.

        Sections are replaced as a whole, keys are not merged.
        """
        return type(self)({**self._data, **other._data})

    # -- lookup -------------------------------------------------------------

    def contain_section(self, section: str) -> bool:
        return section in self._data

    def section(self, section: str, default: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return a copy of *section*, or *default* (``{}``) if it is missing."""
        if section in self._data:
            return dict(self._data[section])
        return dict(default) if default is not None else {}

    def keys_for_section(self, section: str, default: Iterable[str] | None = None) -> list[str]:
        if section in self._data:
            return list(self._data[section])
        return list(default) if default is not None else []

    def contain_value(self, section: str, key: str) -> bool:
        return self._data.get(section, {}).get(key) is not None

    def value(self, section: str, key: str, default: Any = None) -> Any:
        """Return the raw value, or *default* if section or key is missing."""
        found = self._data.get(section, {}).get(key)
        return default if found is None else found

    def parse_value(self, section: str, key: str, default: Any = None) -> Any:
        """Return the value converted with ``to_type()``.

        Secrets are returned as they are.
        """
        found = self._data.get(section, {}).get(key)
        if found is None:
            return default
        if isinstance(found, Secret):
            return found
        return to_type(found)

    def parse(self, section: str, key: str) -> Parse:
        """Return a ``Parse`` for the value; missing values parse as ``None``.

        Raises:
            LogicError: the value is a ``Secret``.
        """
        found = self._data.get(section, {}).get(key)
        if isinstance(found, Secret):
            raise LogicError("Can not parse fields with passwords")
        return Parse(found)

    # -- iteration ----------------------------------------------------------

    def __iter__(self) -> Iterator[tuple[str, dict[str, Any]]]:
        for name, values in list(self._data.items()):
            yield name, dict(values)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, section: object) -> bool:
        return section in self._data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sections={list(self._data)!r})"


class ModifiableProperties(Properties):
    """Properties that can be changed in place.

    Setters store the string form of their value and return ``self``::

        props = ModifiableProperties().set_value("net", "host", "example.com")
        props.set_array_value("net", "ports", [80, 443])  # "80|443"
    """

    def set_section(self, section: str, data: Mapping[str, Any]) -> ModifiableProperties:
        self._data[section] = dict(data)
        return self

    def set_value(self, section: str, key: str, value: Any) -> ModifiableProperties:
        self._data.setdefault(section, {})[key] = "" if value is None else str(value)
        return self

    def set_boolean_value(self, section: str, key: str, value: Any) -> ModifiableProperties:
        return self.set_value(section, key, "true" if value is True else "false")

    def set_array_value(
        self, section: str, key: str, values: Iterable[Any]
    ) -> ModifiableProperties:
        return self.set_value(section, key, "|".join(str(item) for item in values))

    def set_hash_value(
        self, section: str, key: str, values: Mapping[Any, Any]
    ) -> ModifiableProperties:
        return self.set_array_value(
            section, key, [f"{name}:{item}" for name, item in values.items()]
        )

    def set_range_value(
        self, section: str, key: str, values: Iterable[Any]
    ) -> ModifiableProperties:
        """Store ``first..last``; elements in between are not checked."""
        items = list(values)
        first = items[0] if items else ""
        last = items[-1] if len(items) > 1 else ""
        return self.set_value(section, key, f"{first}..{last}")

    def unmodifiable(self) -> Properties:
        return Properties(self._data)
