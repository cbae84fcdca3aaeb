from __future__ import annotations

import pytest

from evalbridge import languages
from evalbridge.evaluable import PythonEvaluable
from evalbridge.languages import DEFAULT_LANGUAGE, get_language, parse, register_language
from evalbridge.types import EvalOk, HostInt, HostString, ParsingError, UnknownLanguageError


class _Echo:
    def __init__(self, source: str, prefix: str):
        self.source = source
        self.language_prefix = prefix

    def get_source(self) -> str:
        return self.source

    def get_language_prefix(self) -> str:
        return self.language_prefix

    def evaluate(self, bindings):
        return EvalOk(HostString(self.source))


@pytest.fixture
def echo_language():
    register_language("echo", "Echo", default_expression="anything")(_Echo)
    yield
    languages._LANGUAGES.pop("echo", None)


def test_python_is_registered_by_default() -> None:
    info = get_language("python")

    assert DEFAULT_LANGUAGE == "python"
    assert info.name == "Python"
    assert info.default_expression == "return value"
    assert "python" in languages.languages()


def test_prefix_selects_language_and_is_stripped() -> None:
    ev = parse("python:value + 1")

    assert isinstance(ev, PythonEvaluable)
    assert ev.source == "value + 1"
    assert ev.language_prefix == "python"
    assert ev.get_source() == "value + 1"
    assert ev.get_language_prefix() == "python"
    assert ev.evaluate({"value": HostInt(1)}) == EvalOk(HostInt(2))


@pytest.mark.parametrize(
    "expression",
    [
        pytest.param("value[1:]", id="slice-colon"),
        pytest.param("{'a': value}['a']", id="dict-colon"),
        pytest.param("lambda: 1", id="lambda-colon"),
    ],
)
def test_unregistered_prefix_goes_to_default_language(expression: str) -> None:
    ev = parse(expression)

    assert ev.source == expression
    assert ev.language_prefix == DEFAULT_LANGUAGE


def test_leading_colon_is_not_a_prefix() -> None:
    with pytest.raises(ParsingError):
        parse(":value")


def test_registered_backend_is_dispatched(echo_language) -> None:
    ev = parse("echo:hello")

    assert isinstance(ev, _Echo)
    assert ev.get_source() == "hello"
    assert ev.get_language_prefix() == "echo"
    assert ev.evaluate({}) == EvalOk(HostString("hello"))
    assert get_language("echo").default_expression == "anything"


def test_unknown_language_lookup() -> None:
    with pytest.raises(UnknownLanguageError) as exc_info:
        get_language("cobol")

    assert isinstance(exc_info.value, KeyError)
    assert "cobol" in str(exc_info.value)
