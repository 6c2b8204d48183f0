"""
services.flat_value - Typed values of a flattened product attribute map.

A product read back from the EAV tables is a map of attribute code →
value whose Python type depends on the attribute's backend type.  Each
value is wrapped in a FlatValue that carries its kind explicitly and
offers the coercions callers are allowed to ask for:

  as_str   numbers render as text, datetimes as "YYYY-MM-DD HH:MM:SS"
  as_int   ints as-is, integral floats and numeric text parsed
  as_bool  ints/floats are truthy when non-zero; "1"/"true"/"yes" on text
  as_list  a list of ids or strings becomes a list of strings

Anything else raises FlatValueError rather than guessing.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUE_TEXT = {"1", "true", "yes", "y", "on"}
_FALSE_TEXT = {"0", "false", "no", "n", "off", ""}


class FlatValueError(ValueError):
    pass


class FlatKind(enum.Enum):
    STR = "str"
    INT = "int"
    FLOAT = "float"
    DATETIME = "datetime"
    LIST = "list"
    NULL = "null"


@dataclass(frozen=True)
class FlatValue:
    kind: FlatKind
    value: object = None

    # ── Construction ───────────────────────────────────────────────────

    @classmethod
    def of(cls, value) -> "FlatValue":
        """Wrap a plain Python value read from storage."""
        if value is None:
            return cls(FlatKind.NULL)
        if isinstance(value, bool):
            return cls(FlatKind.INT, int(value))
        if isinstance(value, int):
            return cls(FlatKind.INT, value)
        if isinstance(value, float):
            return cls(FlatKind.FLOAT, value)
        if isinstance(value, datetime):
            return cls(FlatKind.DATETIME, value)
        if isinstance(value, str):
            return cls(FlatKind.STR, value)
        if isinstance(value, (list, tuple)):
            return cls(FlatKind.LIST, tuple(value))
        raise FlatValueError(f"unsupported attribute value type {type(value).__name__}")

    # ── Coercions ──────────────────────────────────────────────────────

    def as_str(self) -> str:
        if self.kind is FlatKind.NULL:
            return ""
        if self.kind is FlatKind.STR:
            return self.value
        if self.kind is FlatKind.INT:
            return str(self.value)
        if self.kind is FlatKind.FLOAT:
            # 12.0 → "12", 12.5 → "12.5"
            return format(self.value, "g") if self.value.is_integer() else repr(self.value)
        if self.kind is FlatKind.DATETIME:
            return self.value.strftime(DATETIME_FORMAT)
        raise FlatValueError("list value cannot be read as a string")

    def as_int(self) -> int:
        if self.kind is FlatKind.INT:
            return self.value
        if self.kind is FlatKind.FLOAT and self.value.is_integer():
            return int(self.value)
        if self.kind is FlatKind.STR:
            try:
                return int(self.value.strip())
            except ValueError:
                pass
        raise FlatValueError(f"{self.kind.value} value {self.value!r} is not an integer")

    def as_bool(self) -> bool:
        if self.kind is FlatKind.NULL:
            return False
        if self.kind in (FlatKind.INT, FlatKind.FLOAT):
            return self.value != 0
        if self.kind is FlatKind.STR:
            text = self.value.strip().lower()
            if text in _TRUE_TEXT:
                return True
            if text in _FALSE_TEXT:
                return False
        raise FlatValueError(f"{self.kind.value} value {self.value!r} is not a boolean")

    def as_list(self) -> list[str]:
        if self.kind is FlatKind.NULL:
            return []
        if self.kind is FlatKind.LIST:
            return [FlatValue.of(item).as_str() for item in self.value]
        return [self.as_str()]

    def to_json(self):
        """JSON-ready form: datetimes as text, lists as lists."""
        if self.kind is FlatKind.DATETIME:
            return self.as_str()
        if self.kind is FlatKind.LIST:
            return list(self.value)
        return self.value


def flatten(values: dict) -> dict[str, FlatValue]:
    """Wrap every value of a code → raw value map."""
    return {code: FlatValue.of(v) for code, v in values.items()}
