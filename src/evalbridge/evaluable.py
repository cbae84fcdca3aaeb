from __future__ import annotations

import hashlib
import logging
import re
from typing import Any, Callable, List, Mapping, Optional

from .languages import register_language
from .marshal import marshal_value, unmarshal_value
from .runtime import ScriptRuntime, default_runtime
from .types import BindingError, EvalError, EvalOk, EvalResult, HostValue, ParsingError, is_host_value
from .utils import describe_exception, format_py_trace

logger = logging.getLogger(__name__)

# Positional calling convention shared by every compiled expression.
PARAMETER_NAMES = ("value", "cell", "cells", "row", "rowIndex", "value1", "value2")

INDENT = "  "
_LINE_SPLIT = re.compile(r"\r\n|\r|\n")

def function_name_for(source: str) -> str:
    """Deterministic dunder name for the function compiled from ``source``."""
    digest = hashlib.blake2b(source.encode("utf-8", "surrogatepass"), digest_size=8).digest()
    return f"__temp_{abs(int.from_bytes(digest, 'big', signed=True))}__"

def is_single_expression(source: str) -> bool:
    try:
        compile(source, "<expression>", "eval")
    except (SyntaxError, ValueError):
        return False

    return True

def build_definition(name: str, source: str) -> str:
    """Wrap ``source`` as the body of ``def name(value, cell, ...)``.

    A bare expression is returned from the function; anything else is the
    body verbatim. Every line gets the same indent.
    """
    lines: List[str] = _LINE_SPLIT.split(source)

    if is_single_expression(source):
        lines = ["return ("] + [INDENT + line for line in lines] + [")"]

    header = f"def {name}({', '.join(PARAMETER_NAMES)}):"
    return header + "".join("\n" + INDENT + line for line in lines)

class CompiledExpression:
    """A user snippet registered as a named function in the shared runtime."""

    # The def header precedes the user's first line.
    LINE_OFFSET = 1

    def __init__(self, runtime: ScriptRuntime, source: str):
        self.runtime = runtime
        self.source = source
        self.name = function_name_for(source)
        self.definition = build_definition(self.name, source)

        with runtime.lock:
            runtime.define(self.name, self.definition)
            self.function: Callable[..., Any] = runtime.function(self.name)

    def __call__(self, *args: Any) -> Any:
        with self.runtime.lock:
            return self.function(*args)

def marshal_arguments(bindings: Mapping[str, HostValue]) -> List[Any]:
    if not isinstance(bindings, Mapping):
        raise BindingError(f"bindings must be a mapping, not {type(bindings).__name__}")

    for key in bindings:
        if not isinstance(key, str):
            raise BindingError(f"binding names must be strings, got {key!r}")

    args: List[Any] = []

    for name in PARAMETER_NAMES:
        value = bindings.get(name)
        if value is None:
            args.append(None)
            continue

        if not is_host_value(value):
            raise BindingError(f"binding '{name}' holds {type(value).__name__}, not a host value")
        args.append(marshal_value(value, bindings))

    return args

class PythonEvaluable:
    """Evaluates a Python snippet against a binding set.

    Syntax errors fail construction with ParsingError. Errors raised while the
    snippet runs come back from ``evaluate`` as EvalError.
    """

    def __init__(self, source: str, language_prefix: str = "python", runtime: Optional[ScriptRuntime] = None):
        self._source = source
        self._language_prefix = language_prefix
        self.runtime = runtime if runtime is not None else default_runtime()

        try:
            self.compiled = CompiledExpression(self.runtime, source)
        except SyntaxError as exc:
            line = max((exc.lineno or 1) - CompiledExpression.LINE_OFFSET, 1)
            raise ParsingError(f"Syntax error on line {line}: {exc.msg}", source) from exc
        except ValueError as exc:
            raise ParsingError(f"Syntax error: {exc}", source) from exc

    @property
    def source(self) -> str:
        return self._source

    @property
    def language_prefix(self) -> str:
        return self._language_prefix

    def get_source(self) -> str:
        return self._source

    def get_language_prefix(self) -> str:
        return self._language_prefix

    def evaluate(self, bindings: Mapping[str, HostValue]) -> EvalResult:
        args = marshal_arguments(bindings)

        # Unmarshalling may run script code (generators), so it shares the lock.
        with self.runtime.lock:
            try:
                return EvalOk(unmarshal_value(self.compiled(*args)))
            except (Exception, SystemExit) as exc:
                logger.debug("Evaluation of %s failed: %r", self.compiled.name, exc)
                return EvalError(describe_exception(exc), traceback=format_py_trace(exc))

    def __repr__(self) -> str:
        return f"PythonEvaluable({self._language_prefix}:{self._source!r})"

@register_language("python", "Python", default_expression="return value")
def create_parser(source: str, language_prefix: str) -> PythonEvaluable:
    return PythonEvaluable(source, language_prefix)
