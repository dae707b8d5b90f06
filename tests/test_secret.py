"""Tests for _secret.py: Secret, SecretStore and backings."""

import copy
import gc
import logging
import pickle

import pytest
from pydantic import BaseModel, ValidationError

from propvalues._secret import (
    BACKING_BASE64,
    BACKING_FERNET,
    ENV_BACKING,
    Secret,
    SecretStore,
    get_secret_store,
    set_secret_store,
)
from propvalues._testing import override_secret_backing
from propvalues._types import InvalidArgumentError, LogicError


@pytest.fixture(autouse=True)
def _fresh_store():
    """Give each test an empty default store."""
    set_secret_store(SecretStore())
    yield
    set_secret_store(None)


class TestCreate:
    def test_unveil_returns_payload(self):
        assert Secret.create("payload").unveil() == "payload"

    def test_existing_secret_is_returned_unchanged(self):
        secret = Secret.create("payload")
        assert Secret.create(secret) is secret

    @pytest.mark.parametrize("raw", [None, ""])
    def test_none_or_empty_raises(self, raw):
        with pytest.raises(InvalidArgumentError, match="for_null"):
            Secret.create(raw)

    @pytest.mark.parametrize("raw", [303, b"payload", ["payload"]])
    def test_non_string_raises(self, raw):
        with pytest.raises(InvalidArgumentError, match="Can only create a Secret from a string"):
            Secret.create(raw)

    def test_is_contained(self):
        secret = Secret.create("payload")
        assert secret.is_contained() is True
        assert secret.is_null() is False

    def test_length(self):
        secret = Secret.create("payload")
        assert secret.length() == 7
        assert len(secret) == 7

    def test_payload_is_not_stored_in_plain(self):
        Secret.create("payload")
        store = get_secret_store()
        assert all(payload != "payload" for payload in store._payloads.values())

    def test_explicit_store(self):
        store = SecretStore(BACKING_BASE64)
        secret = Secret.create("payload", store)
        assert store.contains(secret._id)
        assert len(get_secret_store()) == 0
        assert secret.unveil() == "payload"


class TestForNull:
    def test_null_state(self):
        secret = Secret.for_null()
        assert secret.is_null() is True
        assert secret.is_contained() is True
        assert secret.unveil() is None
        assert secret.length() == 0

    def test_substring_of_null_returns_self(self):
        secret = Secret.for_null()
        assert secret.substring(1) is secret


class TestFailedCreation:
    @pytest.mark.parametrize("backing", ["__none", "__none_error"])
    def test_secret_is_not_contained(self, backing):
        with override_secret_backing(backing):
            secret = Secret.create("payload")
            assert secret.is_contained() is False
            assert secret.is_null() is False
            assert secret.length() == 0

    def test_unveil_raises(self):
        with override_secret_backing("__none"):
            secret = Secret.create("payload")
            with pytest.raises(LogicError, match="An error occurred during string encryption."):
                secret.unveil()

    @pytest.mark.parametrize(
        "backing, error_name", [("__none", "Exception"), ("__none_error", "SystemError")]
    )
    def test_failure_is_logged_without_payload(self, caplog, backing, error_name):
        caplog.set_level(logging.WARNING, logger="propvalues._secret")
        with override_secret_backing(backing):
            Secret.create("payload")
        assert error_name in caplog.text
        assert "payload" not in caplog.text


class TestSubstring:
    @pytest.mark.parametrize(
        "start, length, expected",
        [
            (0, None, "payload"),
            (3, None, "load"),
            (1, 3, "ayl"),
            (-4, None, "load"),
            (0, -1, "payloa"),
            (-4, 2, "lo"),
        ],
    )
    def test_substring(self, start, length, expected):
        assert Secret.create("payload").substring(start, length).unveil() == expected

    def test_returns_new_secret(self):
        secret = Secret.create("payload")
        part = secret.substring(1)
        assert part is not secret
        assert isinstance(part, Secret)

    def test_start_out_of_range(self):
        with pytest.raises(InvalidArgumentError, match="out of range"):
            Secret.create("payload").substring(50)

    def test_empty_substring_raises(self):
        with pytest.raises(InvalidArgumentError):
            Secret.create("payload").substring(7)


class TestRedaction:
    def test_repr(self):
        secret = Secret.create("payload")
        assert repr(secret) == "Secret('***')"
        assert "payload" not in repr(secret)

    def test_str(self):
        assert str(Secret.create("payload")) == "***"
        assert f"{Secret.create('payload')}" == "***"

    def test_containers_do_not_leak(self):
        assert "payload" not in repr([Secret.create("payload")])
        assert "payload" not in repr({"password": Secret.create("payload")})

    def test_pickle_raises(self):
        with pytest.raises(LogicError, match="Cannot serialize instances of Secret"):
            pickle.dumps(Secret.create("payload"))

    @pytest.mark.parametrize("copier", [copy.copy, copy.deepcopy])
    def test_copy_raises(self, copier):
        with pytest.raises(LogicError):
            copier(Secret.create("payload"))


class TestLifecycle:
    def test_close_discards_payload(self):
        secret = Secret.create("payload")
        assert len(get_secret_store()) == 1
        secret.close()
        assert secret.closed is True
        assert secret.is_contained() is False
        assert len(get_secret_store()) == 0

    def test_close_twice(self):
        secret = Secret.create("payload")
        secret.close()
        secret.close()
        assert secret.closed is True

    def test_context_manager(self):
        with Secret.create("payload") as secret:
            assert secret.unveil() == "payload"
        assert secret.closed is True
        assert len(get_secret_store()) == 0

    def test_garbage_collection_discards_payload(self):
        secret = Secret.create("payload")
        del secret
        gc.collect()
        assert len(get_secret_store()) == 0


class TestSwitchBacking:
    def test_rejected_while_secrets_exist(self):
        secret = Secret.create("payload")
        with pytest.raises(LogicError, match="Can not switch backing while secured strings are stored"):
            Secret.switch_backing(BACKING_BASE64)
        secret.close()

    def test_allowed_after_release(self):
        secret = Secret.create("payload")
        del secret
        gc.collect()
        Secret.switch_backing(BACKING_BASE64)
        assert get_secret_store().backing == BACKING_BASE64
        assert Secret.create("payload").unveil() == "payload"

    def test_unknown_backing(self):
        with pytest.raises(InvalidArgumentError, match="Unknown backing nope"):
            Secret.switch_backing("nope")

    def test_unknown_backing_on_store_creation(self):
        with pytest.raises(InvalidArgumentError):
            SecretStore("nope")

    def test_switch_is_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="propvalues._secret")
        Secret.switch_backing(BACKING_BASE64)
        assert "base64" in caplog.text


class TestDefaultStore:
    def test_default_backing(self, monkeypatch):
        monkeypatch.delenv(ENV_BACKING, raising=False)
        set_secret_store(None)
        assert get_secret_store().backing == BACKING_FERNET

    def test_backing_from_environment(self, monkeypatch):
        monkeypatch.setenv(ENV_BACKING, BACKING_BASE64)
        set_secret_store(None)
        assert get_secret_store().backing == BACKING_BASE64

    def test_store_is_reused(self):
        assert get_secret_store() is get_secret_store()

    def test_repr_does_not_leak(self):
        Secret.create("payload")
        assert "payload" not in repr(get_secret_store())


class _Credentials(BaseModel):
    """Shared Pydantic model for Secret field tests."""

    user: str
    password: Secret


class TestPydantic:
    def test_validates_string(self):
        creds = _Credentials(user="admin", password="hunter2")
        assert isinstance(creds.password, Secret)
        assert creds.password.unveil() == "hunter2"

    def test_existing_secret_passes_through(self):
        secret = Secret.create("hunter2")
        assert _Credentials(user="admin", password=secret).password is secret

    def test_empty_string_fails_validation(self):
        with pytest.raises(ValidationError):
            _Credentials(user="admin", password="")

    def test_dump_redacts(self):
        creds = _Credentials(user="admin", password="hunter2")
        assert creds.model_dump() == {"user": "admin", "password": "***"}
        assert "hunter2" not in creds.model_dump_json()

    def test_repr_redacts(self):
        assert "hunter2" not in repr(_Credentials(user="admin", password="hunter2"))
