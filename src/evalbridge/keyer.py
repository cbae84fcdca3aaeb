"""Keying functions used by clustering to group near-duplicate values."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Dict

from .languages import parse
from .types import HostBool, HostFloat, HostString, HostValue
from .utils import stringify


class Keyer(ABC):
    @abstractmethod
    def key(self, s: str, *o: Any) -> str: raise NotImplementedError


class UserDefinedKeyer(Keyer):
    """Keys values with a user expression, e.g. ``value.strip().lower()``.

    The binding set is reused between calls, so one instance must not be
    shared by concurrent callers.
    """

    def __init__(self, expression: str):
        self.evaluable = parse(expression)
        self.bindings: Dict[str, HostValue] = {
            "true": HostBool(True),
            "false": HostBool(False),
            "PI": HostFloat(math.pi),
        }

    def key(self, s: str, *o: Any) -> str:
        if not isinstance(s, str) or o:
            raise ValueError("Keying functions accept a single string parameter")

        self.bindings["value"] = HostString(s)
        result = self.evaluable.evaluate(self.bindings)

        return stringify(result)
