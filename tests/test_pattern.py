"""Tests for _pattern.py: Pattern matching and failure translation."""

import pytest

from propvalues._pattern import Pattern, pattern
from propvalues._types import InvalidArgumentError, PatternMatchFailed


class TestMatches:
    @pytest.mark.parametrize(
        "regex, value, expected",
        [
            ("/^[a-z]{3}$/i", "Bar", True),
            ("/^[a-z]{3}$/", "Bar", False),
            ("^[a-z]{3}$", "bar", True),
            ("#^foo#", "foobar", True),
            ("/bar/", "foobar", True),
            ("/^bar/", "foobar", False),
            ("/^a.b$/s", "a\nb", True),
            ("/^b$/m", "a\nb", True),
        ],
    )
    def test_matches(self, regex, value, expected):
        assert Pattern(regex).matches(value) is expected

    def test_matches_bytes(self):
        assert Pattern("/^föö$/").matches("föö".encode("utf-8")) is True

    def test_factory(self):
        p = pattern("/foo/")
        assert isinstance(p, Pattern)
        assert p.pattern == "/foo/"

    def test_invalid_regex_not_reported_by_constructor(self):
        Pattern("/(/")


class TestInvalidValue:
    @pytest.mark.parametrize("value", [303, None, ["foo"], 3.03])
    def test_non_string_raises(self, value):
        with pytest.raises(InvalidArgumentError, match="can not be matched against"):
            Pattern("/foo/").matches(value)

    def test_message_names_type(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            Pattern("/foo/").matches(303)
        assert 'Given value of type "int"' in str(exc_info.value)


class TestFailures:
    def test_invalid_regex(self):
        with pytest.raises(PatternMatchFailed) as exc_info:
            Pattern("/(/").matches("foo")
        assert exc_info.value.pattern == "/(/"
        assert exc_info.value.reason == "invalid regular expression"
        assert str(exc_info.value) == (
            'Failure while matching "/(/", reason: invalid regular expression.'
        )

    def test_unknown_modifier(self):
        with pytest.raises(PatternMatchFailed, match="invalid regular expression"):
            Pattern("/foo/q").matches("foo")

    def test_malformed_utf8(self):
        with pytest.raises(PatternMatchFailed) as exc_info:
            Pattern("/foo/").matches(b"\xff\xfe")
        assert exc_info.value.reason == "malformed UTF-8 data"

    def test_truncated_utf8(self):
        with pytest.raises(PatternMatchFailed) as exc_info:
            Pattern("/foo/").matches(b"foo\xe2\x82")
        assert exc_info.value.reason == "did not end at valid UTF-8 codepoint"

    def test_engine_error_is_chained(self):
        with pytest.raises(PatternMatchFailed) as exc_info:
            Pattern("[").matches("foo")
        assert exc_info.value.__cause__ is not None


def test_repr():
    assert repr(Pattern("/foo/")) == "Pattern('/foo/')"
