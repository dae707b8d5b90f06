"""Test utilities for propvalues."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from . import _parse
from ._parse import Recognitions, Symbols
from ._secret import BACKING_BASE64, SecretStore, get_secret_store, set_secret_store


@contextmanager
def override_recognitions(symbols: Symbols | None = None) -> Iterator[Recognitions]:
    """Temporarily replace the default recognizer chain with a fresh one.

    Usage::

        with override_recognitions() as recognitions:
            recognitions.add("binford", lambda s: 6100 if s == "binford" else None)
            assert to_type("binford") == 6100
        # the previous chain is active again
    """
    previous = _parse.default_recognitions
    fresh = Recognitions(symbols)
    _parse.default_recognitions = fresh
    try:
        yield fresh
    finally:
        _parse.default_recognitions = previous


@contextmanager
def override_secret_backing(backing: str = BACKING_BASE64) -> Iterator[SecretStore]:
    """Temporarily use an empty default ``SecretStore`` with *backing*.

    Secrets created inside the block belong to the temporary store::

        with override_secret_backing("__none"):
            assert not Secret.create("payload").is_contained()
    """
    previous = get_secret_store()
    store = SecretStore(backing)
    set_secret_store(store)
    try:
        yield store
    finally:
        set_secret_store(previous)
