"""Registry mapping expression language prefixes to evaluable factories."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Callable, Dict, Mapping

from typing_extensions import Protocol

from .types import EvalResult, HostValue, UnknownLanguageError

DEFAULT_LANGUAGE = "python"

class Evaluable(Protocol):
    @property
    def source(self) -> str: ...

    @property
    def language_prefix(self) -> str: ...

    def get_source(self) -> str: ...

    def get_language_prefix(self) -> str: ...

    def evaluate(self, bindings: Mapping[str, HostValue]) -> EvalResult: ...

ParserFn = Callable[[str, str], Evaluable]

@dataclass(frozen=True)
class LanguageInfo:
    prefix: str
    name: str
    parser: ParserFn
    default_expression: str

_LANGUAGES: Dict[str, LanguageInfo] = {}
_LANGUAGES_INITIALIZED = False

def init_languages() -> None:
    """Import the built-in backends (idempotent) so their registrations run."""
    global _LANGUAGES_INITIALIZED

    if _LANGUAGES_INITIALIZED:
        return

    for module_name in ("evalbridge.evaluable",):
        importlib.import_module(module_name)

    _LANGUAGES_INITIALIZED = True

def register_language(prefix: str, name: str, *, default_expression: str = "return value"):
    def dec(fn: ParserFn):
        _LANGUAGES[prefix] = LanguageInfo(prefix=prefix, name=name, parser=fn, default_expression=default_expression)
        return fn

    return dec

def get_language(prefix: str) -> LanguageInfo:
    init_languages()

    try:
        return _LANGUAGES[prefix]
    except KeyError:
        raise UnknownLanguageError(prefix) from None

def languages() -> Dict[str, LanguageInfo]:
    init_languages()

    return dict(_LANGUAGES)

def parse(expression: str) -> Evaluable:
    """Compile ``expression``, honouring a leading ``<prefix>:`` tag.

    Text without a registered prefix goes to the default language whole.
    """
    init_languages()
    colon = expression.find(":")

    if colon > 0:
        prefix = expression[:colon]
        info = _LANGUAGES.get(prefix)
        if info is not None:
            return info.parser(expression[colon + 1:], prefix)

    return get_language(DEFAULT_LANGUAGE).parser(expression, DEFAULT_LANGUAGE)
