"""Conversions across the host/script boundary.

Host values are the dataclasses in ``evalbridge.types``; script values are
plain Python objects living in the runtime namespace. ``marshal_value`` goes
host -> script, ``unmarshal_value`` goes script -> host.
"""

from __future__ import annotations

import collections.abc
import math
import numbers
from datetime import datetime, timezone
from typing import Any, Mapping

from .types import (
    INT64_MAX,
    INT64_MIN,
    BindingError,
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

Bindings = Mapping[str, HostValue]


class FieldsAdapter:
    """Script-side view of a host record.

    ``cell.value`` and ``cells["Name"]`` both resolve through
    ``get_field``; each field is converted when it is read, not before.
    """

    __slots__ = ("_host", "_bindings")

    def __init__(self, host: HostObject, bindings: Bindings):
        object.__setattr__(self, "_host", host)
        object.__setattr__(self, "_bindings", bindings)

    def _field(self, name: str) -> tuple[bool, Any]:
        found = self._host.fields.get_field(name, self._bindings)
        if found is None:
            return False, None

        return True, marshal_value(found, self._bindings)

    def __getattr__(self, name: str) -> Any:
        if name in FieldsAdapter.__slots__ or (name.startswith("__") and name.endswith("__")):
            raise AttributeError(name)

        ok, value = self._field(name)
        if not ok:
            raise AttributeError(f"{type(self._host.fields).__name__} has no field '{name}'")

        return value

    def __getitem__(self, key: str) -> Any:
        if not isinstance(key, str):
            raise TypeError(f"field names must be strings, not {type(key).__name__}")

        ok, value = self._field(key)
        if not ok:
            raise KeyError(key)

        return value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._host.fields.get_field(key, self._bindings) is not None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"cannot set field '{name}' on a host record")

    def __repr__(self) -> str:
        return f"<host {type(self._host.fields).__name__}>"


def _to_utc_naive(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts

    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def marshal_value(value: HostValue, bindings: Bindings) -> Any:
    match value:
        case HostNull():
            return None
        case HostBool(value=b):
            return bool(b)
        case HostInt(value=n):
            return int(n)
        case HostFloat(value=f):
            return float(f)
        case HostString(value=s):
            return s
        case HostTimestamp(value=ts):
            # Normalized even though hosts normally hand over UTC already.
            return _to_utc_naive(ts)
        case HostSequence(items=items):
            return [marshal_value(item, bindings) for item in items]
        case HostObject():
            return FieldsAdapter(value, bindings)
        case OpaqueScriptValue(value=raw):
            return raw
        case _:
            raise BindingError(f"Cannot pass {type(value).__name__} to a script; expected a host value")


def _unmarshal_datetime(ts: datetime) -> HostTimestamp:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)

    return HostTimestamp(
        datetime(
            ts.year,
            ts.month,
            ts.day,
            ts.hour,
            ts.minute,
            ts.second,
            ts.microsecond,
            tzinfo=timezone.utc,
        )
    )


def _unmarshal_integral(n: numbers.Integral) -> HostValue:
    as_int = int(n)
    if INT64_MIN <= as_int <= INT64_MAX:
        return HostInt(as_int)

    # Past 64 bits the value degrades to a float; precision loss is accepted.
    try:
        return HostFloat(float(as_int))
    except OverflowError:
        return HostFloat(math.inf if as_int > 0 else -math.inf)


def unmarshal_value(value: Any) -> HostValue:
    match value:
        case None:
            return HostNull()
        case FieldsAdapter():
            return value._host
        case bool():
            return HostBool(value)
        case datetime():
            return _unmarshal_datetime(value)
        case numbers.Integral():
            return _unmarshal_integral(value)
        case numbers.Real():
            return HostFloat(float(value))
        case str():
            return HostString(value)
        case bytes() | bytearray() | collections.abc.Mapping():
            return OpaqueScriptValue(value)
        case collections.abc.Iterable():
            return HostSequence(tuple(unmarshal_value(item) for item in value))
        case _:
            return OpaqueScriptValue(value)
