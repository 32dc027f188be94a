"""Column value coercion from source type codes to typed output values.

Source type codes are JDBC ``java.sql.Types`` integers, as reported by the
capture layer. Each code falls into a ``TypeClass`` and every type class has
exactly one coercion function. Unrecognized codes pass the raw string through.
"""

import math
import re
import struct
from decimal import ROUND_HALF_UP, Context, Decimal
from enum import Enum, IntEnum
from fractions import Fraction
from typing import Any, Callable, Dict, Optional, Tuple

from .errors import ValueCoercionError


class SqlType(IntEnum):
    """Source type codes the formatter knows about."""

    BIT = -7
    TINYINT = -6
    BIGINT = -5
    LONGVARCHAR = -1
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93


class TypeClass(str, Enum):
    """Output value kind a source column is coerced to."""

    DOUBLE = "double"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    BOOLEAN = "boolean"
    STRING = "string"


SQL_TYPE_CLASSES: Dict[int, TypeClass] = {
    SqlType.NUMERIC: TypeClass.DOUBLE,
    SqlType.DOUBLE: TypeClass.DOUBLE,
    SqlType.BIT: TypeClass.INT32,
    SqlType.TINYINT: TypeClass.INT32,
    SqlType.SMALLINT: TypeClass.INT32,
    SqlType.INTEGER: TypeClass.INT32,
    SqlType.BIGINT: TypeClass.INT64,
    SqlType.FLOAT: TypeClass.FLOAT32,
    SqlType.REAL: TypeClass.FLOAT32,
    SqlType.BOOLEAN: TypeClass.BOOLEAN,
}

# Enough digits to hold any finite double at 16 fractional digits.
_ROUNDING_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)
_SIXTEEN_PLACES = Decimal(1).scaleb(-16)

# Java floating-point literals: optional type suffix, decimal or binary-exponent hex.
_DECIMAL_LITERAL = re.compile(
    r"([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)[fFdD]?", re.ASCII
)
_HEX_LITERAL = re.compile(
    r"([+-]?)0[xX]([0-9a-fA-F]*)\.?([0-9a-fA-F]*)[pP]([+-]?\d+)[fFdD]?", re.ASCII
)
_INTEGER_LITERAL = re.compile(r"[+-]?\d+", re.ASCII)
_SPECIAL_FLOATS = {
    "NaN": math.nan,
    "+NaN": math.nan,
    "-NaN": math.nan,
    "Infinity": math.inf,
    "+Infinity": math.inf,
    "-Infinity": -math.inf,
}

_INT32_RANGE = (-(2**31), 2**31 - 1)
_INT64_RANGE = (-(2**63), 2**63 - 1)


def type_class_for(sql_type: int) -> TypeClass:
    """Type class for a source type code; unknown codes are strings."""
    return SQL_TYPE_CLASSES.get(sql_type, TypeClass.STRING)


def _parse_literal(raw: str) -> Tuple[float, Callable[[], Fraction]]:
    """Nearest double to a Java floating-point literal, plus its exact value on demand."""
    text = raw.strip()
    match = _DECIMAL_LITERAL.fullmatch(text)
    if match:
        literal = match.group(1)
        return float(literal), lambda: Fraction(Decimal(literal))

    match = _HEX_LITERAL.fullmatch(text)
    if not match or not (match.group(2) or match.group(3)):
        raise ValueError(raw)
    sign, whole, fraction, exponent = match.groups()
    try:
        value = float.fromhex(f"{sign}0x{whole or '0'}.{fraction or '0'}p{exponent}")
    except OverflowError:
        value = -math.inf if sign == "-" else math.inf

    def exact() -> Fraction:
        magnitude = Fraction(int(whole + fraction, 16)) * Fraction(2) ** (
            int(exponent) - 4 * len(fraction)
        )
        return -magnitude if sign == "-" else magnitude

    return value, exact


def _parse_double(raw: str) -> float:
    value, _ = _parse_literal(raw)
    if not math.isfinite(value):
        raise ValueError(raw)
    return value


def _to_rounded_double(raw: str) -> float:
    # Decimal(float) is the exact binary value, so rounding happens on the parsed double.
    exact = Decimal(_parse_double(raw))
    rounded = exact.quantize(
        _SIXTEEN_PLACES, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT
    )
    return float(rounded)


def _parse_integer(raw: str, bounds: tuple) -> int:
    if not _INTEGER_LITERAL.fullmatch(raw):
        raise ValueError(raw)
    value = int(raw)
    low, high = bounds
    if value < low or value > high:
        raise ValueError(raw)
    return value


def _to_int32(raw: str) -> int:
    return _parse_integer(raw, _INT32_RANGE)


def _to_int64(raw: str) -> int:
    return _parse_integer(raw, _INT64_RANGE)


def _narrow(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _float32_neighbor(value: float, up: bool) -> float:
    """Adjacent single-precision value above or below ``value``."""
    if value == 0.0:
        smallest = math.ldexp(1.0, -149)
        return smallest if up else -smallest
    bits = struct.unpack("<I", struct.pack("<f", value))[0]
    bits += 1 if (value > 0) == up else -1
    return struct.unpack("<f", struct.pack("<I", bits))[0]


def _to_float32(raw: str) -> float:
    text = raw.strip()
    if text in _SPECIAL_FLOATS:
        return _SPECIAL_FLOATS[text]
    value, exact = _parse_literal(raw)
    try:
        narrowed = _narrow(value)
    except OverflowError:
        return math.copysign(math.inf, value)
    if narrowed == value or math.isinf(value):
        return narrowed

    # A double sitting exactly between two floats was itself rounded; the
    # literal's exact value decides the tie so the result is rounded once.
    other = _float32_neighbor(narrowed, up=value > narrowed)
    if value != (narrowed + other) / 2:
        return narrowed
    exact_value = exact()
    if exact_value > Fraction(value):
        return max(narrowed, other)
    if exact_value < Fraction(value):
        return min(narrowed, other)
    return narrowed


def _to_boolean(raw: str) -> bool:
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(raw)


def _to_string(raw: str) -> str:
    return raw


COERCERS: Dict[TypeClass, Callable[[str], Any]] = {
    TypeClass.DOUBLE: _to_rounded_double,
    TypeClass.INT32: _to_int32,
    TypeClass.INT64: _to_int64,
    TypeClass.FLOAT32: _to_float32,
    TypeClass.BOOLEAN: _to_boolean,
    TypeClass.STRING: _to_string,
}

if set(COERCERS) != set(TypeClass):
    raise RuntimeError("every TypeClass needs a coercion function")


def coerce_value(
    sql_type: int,
    raw: str,
    treat_all_as_strings: bool = False,
    column: Optional[str] = None,
) -> Any:
    """Convert a raw source string to the value for its declared type.

    With ``treat_all_as_strings`` the raw string is returned untouched.
    Raises ValueCoercionError when the string does not parse.
    """
    if treat_all_as_strings:
        return raw
    coercer = COERCERS[type_class_for(sql_type)]
    try:
        return coercer(raw)
    except (ValueError, ArithmeticError) as e:
        raise ValueCoercionError(raw, sql_type, column) from e
