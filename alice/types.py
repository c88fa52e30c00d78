"""Runtime values for Alice.

This module defines the runtime value model used by the Alice
interpreter. Integers, floats, strings and booleans are carried as the
matching Python objects; nil, arrays and ranges have their own classes.
It also holds the rules every stage agrees on for printing values,
naming their types, truthiness, equality and the int64 limits.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterator, List
import math

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class NilVal:
    """Marker object for the Alice `nil` value."""
    def __repr__(self) -> str:
        return 'nil'


NIL = NilVal()


@dataclass
class ArrayVal:
    """Represents an Alice array value: an ordered sequence of values."""
    items: List[Any]

    def __repr__(self) -> str:
        return f"Array({self.items!r})"


@dataclass(frozen=True)
class RangeVal:
    """Represents a half-open integer range `start..end`.

    The start is included and the end is excluded; a range whose end is
    not above its start is empty.
    """
    start: int
    end: int

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end))

    def __repr__(self) -> str:
        return f"{self.start}..{self.end}"


def in_int64(value: int) -> bool:
    return INT64_MIN <= value <= INT64_MAX


def is_int(value: Any) -> bool:
    # bool is a subclass of int; booleans are never integers in Alice
    return isinstance(value, int) and not isinstance(value, bool)


def type_name(value: Any) -> str:
    """Return the Alice type name of a runtime value."""
    if isinstance(value, bool):
        return 'bool'
    if isinstance(value, int):
        return 'int'
    if isinstance(value, float):
        return 'float'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, ArrayVal):
        return 'array'
    if isinstance(value, RangeVal):
        return 'range'
    if isinstance(value, NilVal):
        return 'nil'
    return getattr(value, 'type_name', type(value).__name__)


def format_float(value: float) -> str:
    """Shortest round-trip decimal, dropping the fraction of integral values."""
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    if value == 0.0:
        return '-0' if math.copysign(1.0, value) < 0 else '0'
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if 'e' in text:
        # positional notation only
        text = format(Decimal(text), 'f')
    return text


def to_string(value: Any) -> str:
    """Convert an Alice value to the text `println` writes for it."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, NilVal):
        return 'nil'
    return debug_repr(value)


def debug_repr(value: Any) -> str:
    """Debug-style rendering used for array listings and error messages.

    Unlike `to_string`, strings are quoted and floats always keep a
    fractional part, so `1` and `1.0` and `"1"` read differently.
    """
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, float):
        text = format_float(value)
        if math.isfinite(value) and value.is_integer():
            text += '.0'
        return text
    if isinstance(value, ArrayVal):
        return '[' + ', '.join(debug_repr(item) for item in value.items) + ']'
    if isinstance(value, (bool, int, NilVal)):
        return to_string(value)
    return repr(value)


def is_truthy(value: Any) -> bool:
    """nil and false are falsy; every other value, 0 and "" included, is truthy."""
    if isinstance(value, NilVal):
        return False
    if isinstance(value, bool):
        return value
    return True


def equal_values(a: Any, b: Any) -> bool:
    """Equality between same-variant primitives; any other pairing is unequal."""
    if isinstance(a, NilVal) and isinstance(b, NilVal):
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_int(a) and is_int(b):
        return a == b
    if isinstance(a, float) and isinstance(b, float):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return False
