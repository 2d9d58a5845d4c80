"""
Runtime value model for the HCL interpreter.

Values are plain Python objects drawn from a closed set:

    nil       None
    boolean   bool
    number    float (ints produced by native code are accepted)
    text      str
    callable  HclFunction, NativeFunction
    class     HclClass
    instance  HclInstance (including ModuleNamespace)

kind_of() is the single classification point; operators and call sites
dispatch on the returned ValueKind instead of probing Python types.
"""

import math
from decimal import Decimal
from enum import Enum
from typing import Any

from .callables import HclCallable, HclClass, HclInstance
from ..errors import InternalError


# Longest text a repetition may produce
MAX_TEXT_LENGTH = 1 << 28


class ValueKind(Enum):
    NIL = "nil"
    BOOLEAN = "boolean"
    NUMBER = "number"
    TEXT = "text"
    CALLABLE = "callable"
    CLASS = "class"
    INSTANCE = "instance"


def kind_of(value: Any) -> ValueKind:
    """Classify a runtime value. Foreign Python objects are an internal fault."""
    if value is None:
        return ValueKind.NIL
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    # class before instance and callable: a class is both
    if isinstance(value, HclClass):
        return ValueKind.CLASS
    if isinstance(value, HclInstance):
        return ValueKind.INSTANCE
    if isinstance(value, HclCallable):
        return ValueKind.CALLABLE
    raise InternalError(f"unsupported runtime value of type {type(value).__name__}")


def is_truthy(value: Any) -> bool:
    """nil and false are falsy; everything else (0 and "" included) is truthy."""
    kind = kind_of(value)
    if kind is ValueKind.NIL:
        return False
    if kind is ValueKind.BOOLEAN:
        return value
    return True


def is_equal(left: Any, right: Any) -> bool:
    """Structural equality for primitives, identity for objects."""
    left_kind = kind_of(left)
    if left_kind is not kind_of(right):
        return False
    if left_kind is ValueKind.NIL:
        return True
    if left_kind in (ValueKind.BOOLEAN, ValueKind.NUMBER, ValueKind.TEXT):
        return left == right
    return left is right


def format_number(number: float) -> str:
    """
    Canonical text of a number.

    Magnitudes in [1e-3, 1e7) print in plain decimal, others in exponent
    form (1.0E21, 1.5E-4). A trailing ".0" is dropped, so integral values
    print without a fraction and negative zero prints as -0.
    """
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"

    number = float(number)
    magnitude = abs(number)
    if magnitude == 0 or 1e-3 <= magnitude < 1e7:
        text = repr(number)
        return text[:-2] if text.endswith(".0") else text

    exact = Decimal(repr(magnitude))
    digits = "".join(str(d) for d in exact.as_tuple().digits).rstrip("0") or "0"
    sign = "-" if number < 0 else ""
    return f"{sign}{digits[0]}.{digits[1:] or '0'}E{exact.adjusted()}"


def stringify(value: Any) -> str:
    """Canonical text form used by print and string concatenation."""
    kind = kind_of(value)
    if kind is ValueKind.NIL:
        return "nil"
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER:
        return format_number(value)
    if kind is ValueKind.TEXT:
        return value
    return str(value)


def repeat_count(count: float) -> int:
    """Number of repetitions for text * number, or -1 if the count is invalid."""
    if not math.isfinite(count) or count < 0:
        return -1
    return math.floor(count)
