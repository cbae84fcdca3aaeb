from __future__ import annotations

import os as _os
import traceback
from typing import Optional

from .types import (
    EvalError,
    EvalOk,
    EvalResult,
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
)

DEBUG_PY_TRACE_ENV = "EVALBRIDGE_DEBUG_PY_TRACE"


def debug_py_trace_enabled() -> bool:
    """True when evaluation errors should carry the Python traceback."""
    return _os.environ.get(DEBUG_PY_TRACE_ENV, "").lower() in ("1", "true", "yes", "on")


def describe_exception(exc: BaseException) -> str:
    """One-line ``Type: detail`` message; never empty."""
    lines = traceback.format_exception_only(type(exc), exc)
    msg = lines[-1].strip() if lines else ""
    return msg or type(exc).__name__


def format_py_trace(exc: BaseException) -> Optional[str]:
    if not debug_py_trace_enabled():
        return None

    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def stringify(value: Optional[HostValue | EvalResult]) -> str:
    match value:
        case None | HostNull():
            return "null"
        case EvalOk(value=inner):
            return stringify(inner)
        case EvalError(message=msg):
            return msg
        case HostString(value=s):
            return s
        case HostBool(value=b):
            return "true" if b else "false"
        case HostInt(value=n):
            return str(n)
        case HostFloat(value=f):
            return repr(f)
        case HostTimestamp(value=ts):
            return ts.isoformat()
        case HostSequence(items=items):
            return "[" + ", ".join(stringify(item) for item in items) + "]"
        case HostObject(fields=record):
            return str(record)
        case OpaqueScriptValue(value=raw):
            return str(raw)
        case _:
            return str(value)
