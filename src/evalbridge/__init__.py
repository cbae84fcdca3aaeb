"""Evaluate user-written Python snippets against host values."""

from .config import RuntimeConfig
from .evaluable import PARAMETER_NAMES, CompiledExpression, PythonEvaluable
from .keyer import Keyer, UserDefinedKeyer
from .languages import get_language, parse, register_language
from .runtime import ScriptRuntime, default_runtime, set_default_runtime
from .types import (
    BindingError,
    BridgeError,
    EvalError,
    EvalOk,
    EvalResult,
    FieldRecord,
    HasFields,
    HostBool,
    HostFloat,
    HostInt,
    HostNull,
    HostObject,
    HostSequence,
    HostString,
    HostTimestamp,
    HostValue,
    OpaqueScriptValue,
    ParsingError,
    RuntimeInitError,
    UnknownLanguageError,
)

__all__ = [
    "PARAMETER_NAMES",
    "BindingError",
    "BridgeError",
    "CompiledExpression",
    "EvalError",
    "EvalOk",
    "EvalResult",
    "FieldRecord",
    "HasFields",
    "HostBool",
    "HostFloat",
    "HostInt",
    "HostNull",
    "HostObject",
    "HostSequence",
    "HostString",
    "HostTimestamp",
    "HostValue",
    "Keyer",
    "OpaqueScriptValue",
    "ParsingError",
    "PythonEvaluable",
    "RuntimeConfig",
    "RuntimeInitError",
    "ScriptRuntime",
    "UnknownLanguageError",
    "UserDefinedKeyer",
    "default_runtime",
    "get_language",
    "parse",
    "register_language",
    "set_default_runtime",
]
