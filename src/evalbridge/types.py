from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple

from typing_extensions import Protocol, TypeAlias, TypeGuard, runtime_checkable

# ---------- Host value model ----------

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

@dataclass(frozen=True)
class HostNull:
    def __repr__(self) -> str:
        return "null"

@dataclass(frozen=True)
class HostBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class HostInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass(frozen=True)
class HostFloat:
    value: float
    def __repr__(self) -> str:
        return repr(self.value)

@dataclass(frozen=True)
class HostString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass(frozen=True)
class HostTimestamp:
    """An instant with an offset. Naive values are read as UTC by the marshaller."""
    value: datetime
    def __repr__(self) -> str:
        return self.value.isoformat()

@dataclass(frozen=True)
class HostSequence:
    items: Tuple['HostValue', ...]
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@runtime_checkable
class HasFields(Protocol):
    """Row and cell-like host records readable by field name."""

    def get_field(self, name: str, bindings: Mapping[str, 'HostValue']) -> Optional['HostValue']: ...

@dataclass(frozen=True, eq=False)
class HostObject:
    """Host record handed to scripts. Compared by identity of the wrapped record."""
    fields: HasFields

    def __eq__(self, other: object) -> bool:
        return isinstance(other, HostObject) and other.fields is self.fields

    def __hash__(self) -> int:
        return id(self.fields)

    def __repr__(self) -> str:
        return f"<object {type(self.fields).__name__}>"

@dataclass(frozen=True, eq=False)
class OpaqueScriptValue:
    """A script-native value the host carries around without looking inside."""
    value: Any

    def __eq__(self, other: object) -> bool:
        return isinstance(other, OpaqueScriptValue) and other.value is self.value

    def __hash__(self) -> int:
        return id(self.value)

    def __repr__(self) -> str:
        return f"<opaque {type(self.value).__name__}>"

@dataclass
class FieldRecord:
    """Dict-backed HasFields implementation."""
    fields: dict[str, 'HostValue'] = field(default_factory=dict)

    def get_field(self, name: str, bindings: Mapping[str, 'HostValue']) -> Optional['HostValue']:
        del bindings
        return self.fields.get(name)

HostValue: TypeAlias = (
    HostNull
    | HostBool
    | HostInt
    | HostFloat
    | HostString
    | HostTimestamp
    | HostSequence
    | HostObject
    | OpaqueScriptValue
)

_HOST_VALUE_TYPES: Tuple[type, ...] = (
    HostNull,
    HostBool,
    HostInt,
    HostFloat,
    HostString,
    HostTimestamp,
    HostSequence,
    HostObject,
    OpaqueScriptValue,
)

def is_host_value(value: object) -> TypeGuard[HostValue]:
    return isinstance(value, _HOST_VALUE_TYPES)

# ---------- Evaluation outcomes ----------

@dataclass(frozen=True)
class EvalOk:
    value: HostValue

@dataclass(frozen=True)
class EvalError:
    """Failure raised by a script while it ran, returned instead of a value."""
    message: str
    traceback: Optional[str] = field(default=None, compare=False)

    def __str__(self) -> str:
        return self.message

EvalResult: TypeAlias = EvalOk | EvalError

# ---------- Exceptions ----------

class BridgeError(Exception):
    pass

class ParsingError(BridgeError):
    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source

class RuntimeInitError(BridgeError):
    pass

class BindingError(BridgeError, TypeError):
    pass

class UnknownLanguageError(BridgeError, KeyError):
    def __init__(self, prefix: str):
        super().__init__(f"No language registered for prefix '{prefix}'")
        self.prefix = prefix

    def __str__(self) -> str:
        return str(self.args[0])
