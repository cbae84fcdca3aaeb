from __future__ import annotations

import pytest

from evalbridge.keyer import Keyer, UserDefinedKeyer
from evalbridge.types import HostBool, HostFloat, HostString, ParsingError


@pytest.mark.parametrize(
    "expression, value, expected",
    [
        pytest.param("value.strip().lower()", " Foo ", "foo", id="strip-lower"),
        pytest.param("python:value.strip().lower()", " Foo ", "foo", id="prefixed"),
        pytest.param("None", "x", "null", id="null-result"),
        pytest.param("return", "x", "null", id="bare-return"),
        pytest.param("len(value)", "abcd", "4", id="int-result"),
        pytest.param("len(value) / 2", "abc", "1.5", id="float-result"),
        pytest.param("value == ''", "", "true", id="bool-result"),
        pytest.param("sorted(set(value))", "bab", "[a, b]", id="sequence-result"),
        pytest.param("' '.join(sorted(value.split()))", "b a c", "a b c", id="fingerprint-like"),
    ],
)
def test_user_defined_keys(expression: str, value: str, expected: str) -> None:
    assert UserDefinedKeyer(expression).key(value) == expected


def test_key_rejects_null() -> None:
    keyer = UserDefinedKeyer("value.strip().lower()")

    with pytest.raises(ValueError, match="single string parameter"):
        keyer.key(None)


@pytest.mark.parametrize(
    "value",
    [
        pytest.param(5, id="int"),
        pytest.param(b"foo", id="bytes"),
        pytest.param(["a"], id="list"),
    ],
)
def test_key_rejects_non_strings(value: object) -> None:
    keyer = UserDefinedKeyer("value")

    with pytest.raises(ValueError, match="single string parameter"):
        keyer.key(value)


def test_key_rejects_extra_arguments() -> None:
    keyer = UserDefinedKeyer("value")

    with pytest.raises(ValueError):
        keyer.key("a", "b")


def test_parse_failure_reaches_constructor_caller() -> None:
    with pytest.raises(ParsingError):
        UserDefinedKeyer("value.(")


def test_runtime_error_keys_to_message() -> None:
    key = UserDefinedKeyer("int(value)").key("abc")

    assert key.startswith("ValueError")


def test_bindings_reused_with_constants() -> None:
    keyer = UserDefinedKeyer("value")
    bindings = keyer.bindings

    keyer.key("one")
    keyer.key("two")

    assert keyer.bindings is bindings
    assert bindings["value"] == HostString("two")
    assert bindings["true"] == HostBool(True)
    assert bindings["false"] == HostBool(False)
    assert isinstance(bindings["PI"], HostFloat)
    assert abs(bindings["PI"].value - 3.141592653589793) < 1e-15


def test_keyer_is_abstract() -> None:
    with pytest.raises(TypeError):
        Keyer()
