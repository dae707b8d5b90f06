"""Typed property values for INI-style configuration.

Provides a heuristic string-to-value parser, a lazily coercing properties
store backed by INI files, and a ``Secret`` wrapper that keeps passwords out
of reprs, logs and pickles.
"""

from ._version import __version__
from ._parse import (
    Parse,
    Recognitions,
    Symbols,
    default_recognitions,
    default_symbols,
    to_bool,
    to_class,
    to_classname,
    to_float,
    to_int,
    to_list,
    to_map,
    to_range,
    to_type,
)
from ._pattern import Pattern, pattern
from ._properties import ModifiableProperties, Properties
from ._result import Result
from ._secret import Secret, SecretStore, get_secret_store, set_secret_store
from ._testing import override_recognitions, override_secret_backing
from ._types import (
    ClassNotFoundError,
    DefaultTypeMismatch,
    InvalidArgumentError,
    LogicError,
    NoSuchCheckError,
    PatternMatchFailed,
    PropertiesFormatError,
    PropValuesError,
    type_of,
)
from ._value import Checks, Value, default_checks, value

for _cls in (ModifiableProperties, Parse, Pattern, Properties, Result, Secret, Value):
    default_symbols.register_class(_cls, f"propvalues\\{_cls.__name__}")
del _cls

__all__ = [
    "__version__",
    # Parsing
    "to_type",
    "to_int",
    "to_float",
    "to_bool",
    "to_list",
    "to_map",
    "to_range",
    "to_class",
    "to_classname",
    "Parse",
    "Recognitions",
    "Symbols",
    "default_recognitions",
    "default_symbols",
    # Properties
    "Properties",
    "ModifiableProperties",
    # Secrets
    "Secret",
    "SecretStore",
    "get_secret_store",
    "set_secret_store",
    # Helpers
    "Pattern",
    "pattern",
    "Result",
    "Value",
    "value",
    "Checks",
    "default_checks",
    "type_of",
    # Errors
    "PropValuesError",
    "InvalidArgumentError",
    "LogicError",
    "PropertiesFormatError",
    "PatternMatchFailed",
    "ClassNotFoundError",
    "NoSuchCheckError",
    "DefaultTypeMismatch",
    # Testing
    "override_recognitions",
    "override_secret_backing",
]
