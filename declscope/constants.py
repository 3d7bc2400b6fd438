"""Literal constants: classifying integer, character and floating tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass

from declscope.types import PrimitiveType, SemanticError, Type

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
UINT_MAX = 2**32 - 1
LLONG_MIN = -(2**63)
LLONG_MAX = 2**63 - 1
FLT_MAX = 3.40282346638528859812e38
FLT_MIN = 1.17549435082228750797e-38

_INTEGER_PATTERNS = {
    8: re.compile(r"\s*([+-]?)([0-7]+)"),
    10: re.compile(r"\s*([+-]?)([0-9]+)"),
    16: re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)"),
}
_DECIMAL_FLOAT = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_HEX_FLOAT = re.compile(
    r"\s*[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?"
)


def _leading_int(text: str, base: int, low: int, high: int) -> int:
    """Parse the integer at the start of ``text``, ignoring what follows it."""
    match = _INTEGER_PATTERNS[base].match(text)
    if match is None:
        raise SemanticError(f"Invalid numeric constant {text}")
    sign, digits = match.groups()
    value = int(sign + digits, base)
    if not low <= value <= high:
        raise SemanticError(f"Numeric constant {text} out of range")
    return value


def _leading_float(text: str) -> float:
    """Parse the floating value at the start of ``text``, ignoring any suffix."""
    match = _HEX_FLOAT.match(text)
    if match is not None:
        return float.fromhex(match.group().strip())
    match = _DECIMAL_FLOAT.match(text)
    if match is None:
        raise SemanticError(f"Invalid numeric constant {text}")
    return float(match.group())


def _integer_type(text: str) -> PrimitiveType:
    longs = sum(ch in "lL" for ch in text)
    unsigned = any(ch in "uU" for ch in text)
    if longs == 2:
        return PrimitiveType.U_LONG_LONG if unsigned else PrimitiveType.LONG_LONG
    if longs == 1:
        return PrimitiveType.U_LONG if unsigned else PrimitiveType.LONG
    if longs == 0:
        value = _leading_int(text, 10, LLONG_MIN, LLONG_MAX)
        if unsigned:
            return PrimitiveType.U_LONG if value > UINT_MAX else PrimitiveType.U_INT
        return PrimitiveType.INT if INT_MIN <= value <= INT_MAX else PrimitiveType.LONG
    return PrimitiveType.ERROR


def _floating_type(text: str) -> PrimitiveType:
    doubles = sum(ch in "lL" for ch in text)
    if any(ch in "fF" for ch in text):
        return PrimitiveType.FLOAT
    if doubles == 1:
        return PrimitiveType.LONG_DOUBLE
    value = _leading_float(text)
    if value > FLT_MAX or value < FLT_MIN:
        return PrimitiveType.DOUBLE
    return PrimitiveType.FLOAT


def constant_type(kind: str, text: str) -> Type:
    """Type of a literal token of ``kind`` (I_CONSTANT, CHAR_CONSTANT or F_CONSTANT)."""
    if kind == "I_CONSTANT":
        index = _integer_type(text)
    elif kind == "CHAR_CONSTANT":
        index = PrimitiveType.CHAR
    elif kind == "F_CONSTANT":
        index = _floating_type(text)
    else:
        raise SemanticError(f"Invalid type: {kind}")
    return Type(index)


def to_decimal(text: str) -> str:
    """Rewrite a hexadecimal or octal literal as decimal; other text is returned as is."""
    if not text.startswith("0"):
        return text
    if text[1:2] in ("x", "X"):
        return str(_leading_int(text, 16, INT_MIN, INT_MAX))
    return str(_leading_int(text, 8, INT_MIN, INT_MAX))


@dataclass(frozen=True)
class Constant:
    """A literal token with its type and normalised value."""

    kind: str
    text: str
    value: str
    type: Type

    @staticmethod
    def from_token(kind: str, text: str) -> Constant:
        """Classify ``text`` and normalise its value, dropping letter suffixes."""
        literal_type = constant_type(kind, text)
        value = to_decimal(text)
        if not literal_type.is_char():
            value = "".join(ch for ch in value if not ch.isalpha())
        return Constant(kind=kind, text=text, value=value, type=literal_type)