"""Secret strings that stay out of reprs, logs and pickles.

A ``Secret`` never holds its payload. The payload is encrypted by the
active backing of a ``SecretStore`` and kept in the store's side-table under
an opaque id; the ``Secret`` only knows that id::

    password = Secret.create(raw)
    print(password)           # ***
    connect(password.unveil())
    password.close()          # drops the encrypted payload

Key material is generated per store whenever the Fernet backing is
installed and shared by all secrets of that store, so it protects against
accidental disclosure, not against an attacker inside the process.
"""

from __future__ import annotations

import base64
import logging
import os
import uuid
import weakref
from dataclasses import dataclass
from typing import Any, Callable

from cryptography.fernet import Fernet
from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from ._types import InvalidArgumentError, LogicError, type_of

logger = logging.getLogger(__name__)

BACKING_FERNET = "fernet"
BACKING_BASE64 = "base64"

ENV_BACKING = "PROPVALUES_SECRET_BACKING"

_NULL_PAYLOAD = object()


# ---------------------------------------------------------------------------
# Backings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Backing:
    """Encryption strategy of a ``SecretStore``."""

    name: str
    encrypt: Callable[[str], Any]
    decrypt: Callable[[Any], str | None]


def _fernet_backing() -> Backing:
    fernet = Fernet(Fernet.generate_key())
    return Backing(
        BACKING_FERNET,
        lambda value: fernet.encrypt(value.encode("utf-8")),
        lambda token: fernet.decrypt(token).decode("utf-8"),
    )


def _base64_backing() -> Backing:
    # reversible by anyone, only keeps payloads out of casual dumps
    return Backing(
        BACKING_BASE64,
        lambda value: base64.b64encode(value.encode("utf-8")),
        lambda encoded: base64.b64decode(encoded).decode("utf-8"),
    )


def _failing_backing(name: str, error: type[Exception]) -> Backing:
    def encrypt(value: str) -> Any:
        raise error("No backing set")

    return Backing(name, encrypt, lambda payload: None)


_BACKINGS: dict[str, Callable[[], Backing]] = {
    BACKING_FERNET: _fernet_backing,
    BACKING_BASE64: _base64_backing,
    # test only: simulate unavailable encryption
    "__none": lambda: _failing_backing("__none", Exception),
    "__none_error": lambda: _failing_backing("__none_error", SystemError),
}


def _create_backing(name: str) -> Backing:
    try:
        factory = _BACKINGS[name]
    except KeyError:
        raise InvalidArgumentError(f"Unknown backing {name}") from None
    return factory()


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SecretStore:
    """Side-tables holding encrypted payloads and lengths of secrets.

    The backing can only be switched while the store is empty, otherwise
    stored payloads could no longer be decrypted.
    """

    def __init__(self, backing: str = BACKING_FERNET) -> None:
        self._payloads: dict[str, Any] = {}
        self._lengths: dict[str, int] = {}
        self._backing = _create_backing(backing)

    @property
    def backing(self) -> str:
        return self._backing.name

    def switch_backing(self, name: str) -> None:
        """Install the backing called *name* with fresh key material.

        Raises:
            LogicError: secrets are still stored.
            InvalidArgumentError: *name* is not a known backing.
        """
        if self._payloads:
            raise LogicError("Can not switch backing while secured strings are stored")

        self._backing = _create_backing(name)
        logger.debug("Switched secret backing to %s", name)

    def put(self, secret_id: str, value: str) -> None:
        self._payloads[secret_id] = self._backing.encrypt(value)
        self._lengths[secret_id] = len(value)

    def put_null(self, secret_id: str) -> None:
        self._payloads[secret_id] = _NULL_PAYLOAD
        self._lengths[secret_id] = 0

    def discard(self, secret_id: str) -> None:
        self._payloads.pop(secret_id, None)
        self._lengths.pop(secret_id, None)

    def contains(self, secret_id: str) -> bool:
        return secret_id in self._payloads

    def is_null(self, secret_id: str) -> bool:
        return self._payloads.get(secret_id) is _NULL_PAYLOAD

    def length(self, secret_id: str) -> int:
        return self._lengths.get(secret_id, 0)

    def reveal(self, secret_id: str) -> str | None:
        payload = self._payloads[secret_id]
        if payload is _NULL_PAYLOAD:
            return None
        return self._backing.decrypt(payload)

    def __len__(self) -> int:
        return len(self._payloads)

    def __repr__(self) -> str:
        return f"SecretStore(backing={self.backing!r}, entries={len(self)})"


# ---------------------------------------------------------------------------
# Module-level store management
# ---------------------------------------------------------------------------

_default_store: SecretStore | None = None


def set_secret_store(store: SecretStore | None) -> None:
    """Set the store used by secrets created without an explicit one."""
    global _default_store
    _default_store = store


def get_secret_store() -> SecretStore:
    """Return the default store, creating it on first use.

    The backing of a newly created store is read from the
    ``PROPVALUES_SECRET_BACKING`` environment variable (``fernet`` if unset).
    """
    global _default_store
    if _default_store is None:
        _default_store = SecretStore(os.environ.get(ENV_BACKING, BACKING_FERNET))
    return _default_store


# ---------------------------------------------------------------------------
# Secret
# ---------------------------------------------------------------------------


class Secret:
    """Reasonably safe container for passwords and similar strings.

    Instances are created with ``Secret.create()`` or ``Secret.for_null()``.
    ``str()``, ``repr()`` and pydantic dumps render ``***``; pickling and
    copying raise ``LogicError``. The payload is released from the store on
    ``close()``, at the end of a ``with`` block, or when the instance is
    garbage collected.
    """

    __slots__ = ("_id", "_store", "_finalizer", "__weakref__")

    def __init__(self, store: SecretStore | None = None) -> None:
        self._id = uuid.uuid4().hex
        self._store = store if store is not None else get_secret_store()
        self._finalizer = weakref.finalize(self, self._store.discard, self._id)

    @classmethod
    def create(cls, value: str | Secret | None, store: SecretStore | None = None) -> Secret:
        """Secure *value*; an existing ``Secret`` is returned unchanged.

        Encryption failures are not raised, since the traceback would carry
        the payload. The returned instance then reports
        ``is_contained() == False``.

        Raises:
            InvalidArgumentError: *value* is ``None``, empty or not a string.
        """
        if isinstance(value, Secret):
            return value

        if value is None or value == "":
            raise InvalidArgumentError(
                "Given string was None or empty, if you explicitly want to"
                " create a Secret with value None use Secret.for_null()"
            )

        if not isinstance(value, str):
            raise InvalidArgumentError(
                f"Can only create a Secret from a string, got {type_of(value)}"
            )

        secret = cls(store)
        try:
            secret._store.put(secret._id, value)
        except Exception as exc:
            logger.warning(
                "Storing secret %s failed with %s, secret is not contained",
                secret._id,
                type(exc).__name__,
            )
            secret._store.discard(secret._id)

        return secret

    @classmethod
    def for_null(cls, store: SecretStore | None = None) -> Secret:
        """Create an instance that explicitly holds no string."""
        secret = cls(store)
        secret._store.put_null(secret._id)
        return secret

    @staticmethod
    def switch_backing(name: str) -> None:
        """Switch the backing of the default store."""
        get_secret_store().switch_backing(name)

    def is_null(self) -> bool:
        return self._store.is_null(self._id)

    def is_contained(self) -> bool:
        """Return ``False`` if encryption failed during creation."""
        return self._store.contains(self._id)

    def unveil(self) -> str | None:
        """Return the plain string; call it as late as possible.

        Raises:
            LogicError: the payload could not be stored on creation.
        """
        if not self.is_contained():
            raise LogicError("An error occurred during string encryption.")

        return self._store.reveal(self._id)

    def length(self) -> int:
        return self._store.length(self._id)

    def substring(self, start: int, length: int | None = None) -> Secret:
        """Return part of the payload as a new ``Secret``.

        Offsets follow ``str`` slicing rules; a negative *length* leaves out
        that many characters at the end.

        Raises:
            InvalidArgumentError: *start* lies beyond the payload, or the
                substring is empty.
        """
        if self.is_null():
            return self

        unveiled = self.unveil() or ""
        if start > len(unveiled):
            raise InvalidArgumentError("Given start offset is out of range.")

        if start < 0:
            start = max(len(unveiled) + start, 0)
        if length is None:
            part = unveiled[start:]
        elif length >= 0:
            part = unveiled[start : start + length]
        else:
            part = unveiled[start:length]

        return Secret.create(part, self._store)

    def close(self) -> None:
        """Remove the payload from the store. Safe to call twice."""
        self._finalizer()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def __enter__(self) -> Secret:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        return self.length()

    # -- redaction ----------------------------------------------------------

    def __repr__(self) -> str:
        return "Secret('***')"

    def __str__(self) -> str:
        return "***"

    def __reduce_ex__(self, protocol: Any) -> Any:
        raise LogicError(f"Cannot serialize instances of {type(self).__name__}")

    # -- Pydantic v2 integration --------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        def _validate(value: Any) -> Secret:
            return cls.create(value)

        def _serialize(value: Secret, _info: Any) -> str:
            return "***"

        return core_schema.no_info_plain_validator_function(
            _validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                _serialize,
                info_arg=True,
            ),
            metadata={"pydantic_js_functions": []},
        )
