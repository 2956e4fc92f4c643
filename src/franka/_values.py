"""Value model of logic expressions and the run-time coercions applied to it.

Expressions are plain nested data as produced by a YAML/JSON/TOML loader:
``None``, ``bool``, ``int``, ``float``, ``str``, sequences (``list``/``tuple``)
and mappings (``dict``). A mapping is an operation whose first key names it.
"""

import json
import math
import re
from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any

from ._errors import InvalidExpressionError

VARIABLE_SIGIL = "$"

_DECIMAL_NUMBER = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_RADIX_NUMBER = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")


class ValueKind(StrEnum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    VARIABLE = "variable"
    ARRAY = "array"
    OPERATION = "operation"


def is_variable_reference(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(VARIABLE_SIGIL)


def variable_name(reference: str) -> str:
    return reference[len(VARIABLE_SIGIL) :]


def classify(value: Any, *, references: bool = True) -> ValueKind:
    """Classify a value into exactly one of the tagged variants.

    Args:
        value: The value to classify.
        references: Whether strings starting with the variable sigil are
            variable references. Evaluated results are classified with
            ``references=False`` since they are never looked up again.

    Raises:
        InvalidExpressionError: If the value is outside the value model.

    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        if references and is_variable_reference(value):
            return ValueKind.VARIABLE
        return ValueKind.STRING
    if isinstance(value, Mapping):
        return ValueKind.OPERATION
    if isinstance(value, Sequence):
        return ValueKind.ARRAY
    raise InvalidExpressionError(value)


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        exp = int(exponent)
        text = f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"
    return text


def to_str(value: Any) -> str:
    """Coerce an evaluated value to its string representation."""
    match classify(value, references=False):
        case ValueKind.NULL:
            return "null"
        case ValueKind.BOOLEAN:
            return "true" if value else "false"
        case ValueKind.NUMBER:
            if isinstance(value, int):
                return str(value)
            return _format_number(value)
        case ValueKind.ARRAY:
            return ",".join("" if item is None else to_str(item) for item in value)
        case ValueKind.OPERATION:
            return "[object Object]"
        case _:
            return value


def truthy(value: Any) -> bool:
    """Coerce an evaluated value to a boolean.

    Only ``false``, ``null``, zero, ``NaN`` and the empty string are false.
    Empty sequences and mappings are true.
    """
    match classify(value, references=False):
        case ValueKind.NULL:
            return False
        case ValueKind.BOOLEAN:
            return value
        case ValueKind.NUMBER:
            return value != 0 and not (isinstance(value, float) and math.isnan(value))
        case ValueKind.STRING:
            return value != ""
        case _:
            return True


def parse_number(text: str) -> float | int:
    """Parse a numeric string, returning NaN when it is not a number.

    Accepts surrounding whitespace, decimal and exponent notation,
    ``Infinity`` and the ``0x``/``0o``/``0b`` prefixes. Blank strings are 0.
    Python-only spellings such as ``1_000``, ``inf`` or ``nan`` are rejected.
    """
    text = text.strip()
    if not text:
        return 0
    if _RADIX_NUMBER.fullmatch(text):
        return int(text, 0)
    if _DECIMAL_NUMBER.fullmatch(text):
        return float(text)
    return math.nan


def to_index(value: Any) -> int:
    """Coerce an evaluated value to an integer position, truncating towards zero."""
    kind = classify(value, references=False)
    if kind is ValueKind.BOOLEAN:
        return int(value)
    if kind is ValueKind.STRING:
        value = parse_number(value)
        kind = ValueKind.NUMBER
    if kind is ValueKind.NUMBER:
        if isinstance(value, float):
            if math.isnan(value):
                return 0
            if math.isinf(value):
                return -(2**63) if value < 0 else 2**63
        return math.trunc(value)
    return 0


def strict_equals(left: Any, right: Any) -> bool:
    """Compare two evaluated values by kind and content, without coercion."""
    kind = classify(left, references=False)
    if kind is not classify(right, references=False):
        return False
    match kind:
        case ValueKind.ARRAY:
            return len(left) == len(right) and all(strict_equals(a, b) for a, b in zip(left, right, strict=True))
        case ValueKind.OPERATION:
            return left.keys() == right.keys() and all(strict_equals(left[k], right[k]) for k in left)
        case _:
            return left == right


def format_display_value(value: Any) -> str:
    """Format an evaluated value for a human reader."""
    match classify(value, references=False):
        case ValueKind.NULL:
            return "null"
        case ValueKind.STRING:
            return json.dumps(value, ensure_ascii=False)
        case ValueKind.BOOLEAN | ValueKind.NUMBER:
            return to_str(value)
        case ValueKind.ARRAY:
            return f"[{len(value)} items]"
        case _:
            return "{...}"
