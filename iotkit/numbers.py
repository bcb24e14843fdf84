"""Numeric comparison, range-checked conversion and number parsing."""

from __future__ import annotations

import enum
import math
import struct

from iotkit.config import Configuration
from iotkit.floats import DOUBLE, SINGLE, FloatTraits, make_float

Number = int | float


class CompareResult(enum.IntFlag):
    """Outcome of comparing two values; combined members test with ``&``."""

    DIFFER = 0
    EQUAL = 1
    GREATER = 2
    LESS = 4
    GREATER_OR_EQUAL = 3
    LESS_OR_EQUAL = 5


class IntType(enum.Enum):
    """Fixed-width integer types a number can be converted to."""

    INT8 = (8, True)
    UINT8 = (8, False)
    INT16 = (16, True)
    UINT16 = (16, False)
    INT32 = (32, True)
    UINT32 = (32, False)
    INT64 = (64, True)
    UINT64 = (64, False)

    @property
    def bits(self) -> int:
        return self.value[0]

    @property
    def signed(self) -> bool:
        return self.value[1]

    @property
    def lowest(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def highest(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1


def _check_number(value: object) -> None:
    if not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {type(value).__name__}")


def arithmetic_compare(lhs: Number, rhs: Number) -> CompareResult:
    """Compare two numbers.

    Integers are compared exactly. If either side is a float both are
    compared as doubles, so a NaN compares as ``EQUAL``.
    """
    _check_number(lhs)
    _check_number(rhs)
    if isinstance(lhs, float) or isinstance(rhs, float):
        lhs, rhs = float(lhs), float(rhs)
    if lhs < rhs:
        return CompareResult.LESS
    if lhs > rhs:
        return CompareResult.GREATER
    return CompareResult.EQUAL


def can_convert_number(value: Number, target: IntType | FloatTraits) -> bool:
    """Return True if ``value`` fits in ``target`` without overflow."""
    _check_number(value)
    if isinstance(target, FloatTraits):
        return True
    if isinstance(value, float):
        if target.bits < DOUBLE.bits:
            return target.lowest <= value <= target.highest
        return value >= target.lowest and value <= DOUBLE.highest_for(
            target.bits, target.signed
        )
    return target.lowest <= value <= target.highest


def _to_float(value: Number, traits: FloatTraits) -> float:
    try:
        result = float(value)
    except OverflowError:
        return math.copysign(math.inf, value)
    if traits.bits == 32 and math.isfinite(result):
        try:
            return struct.unpack("<f", struct.pack("<f", result))[0]
        except OverflowError:
            return math.copysign(math.inf, result)
    return result


def convert_number(value: Number, target: IntType | FloatTraits) -> Number:
    """Convert ``value`` to ``target``; out-of-range integers become 0."""
    if isinstance(target, FloatTraits):
        _check_number(value)
        return _to_float(value, target)
    if not can_convert_number(value, target):
        return 0
    return int(value)


class _Cursor:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    @property
    def char(self) -> str:
        return self.text[self.pos : self.pos + 1]

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def digit(self) -> int | None:
        c = self.char
        if c and "0" <= c <= "9":
            return ord(c) - ord("0")
        return None


def _scale(mantissa: int, exponent: int, traits: FloatTraits) -> float:
    if mantissa == 0:
        return 0.0
    try:
        return make_float(float(mantissa), exponent, traits)
    except ValueError:
        return traits.inf if exponent > 0 else 0.0


def parse_number(text: str, config: Configuration | None = None) -> Number:
    """Parse a JSON number.

    Returns an ``int`` when the text is an integer that fits the configured
    integer width, otherwise a ``float``. Raises ``ValueError`` when the text
    is not a number.
    """
    config = config or Configuration()
    traits = DOUBLE if config.use_double else SINGLE
    int_bits = config.integer_bits
    max_uint = (1 << int_bits) - 1

    cur = _Cursor(text.split("\0", 1)[0])

    negative = False
    if cur.char == "-":
        negative = True
        cur.pos += 1
    elif cur.char == "+":
        cur.pos += 1

    if config.enable_nan and cur.char in ("n", "N"):
        return traits.nan
    if config.enable_infinity and cur.char in ("i", "I"):
        return -traits.inf if negative else traits.inf

    if cur.digit() is None and cur.char != ".":
        raise ValueError(f"not a number: {text!r}")

    mantissa = 0
    exponent_offset = 0

    while (d := cur.digit()) is not None:
        if mantissa > max_uint // 10:
            break
        mantissa *= 10
        if mantissa > max_uint - d:
            break
        mantissa += d
        cur.pos += 1

    if cur.at_end:
        if not negative:
            return mantissa
        if mantissa <= 1 << (int_bits - 1):
            return -mantissa

    while mantissa > traits.mantissa_max:
        mantissa //= 10
        exponent_offset += 1

    while cur.digit() is not None:
        exponent_offset += 1
        cur.pos += 1

    if cur.char == ".":
        cur.pos += 1
        while (d := cur.digit()) is not None:
            if mantissa < traits.mantissa_max // 10:
                mantissa = mantissa * 10 + d
                exponent_offset -= 1
            cur.pos += 1

    exponent = 0
    if cur.char in ("e", "E"):
        cur.pos += 1
        negative_exponent = False
        if cur.char == "-":
            negative_exponent = True
            cur.pos += 1
        elif cur.char == "+":
            cur.pos += 1
        while (d := cur.digit()) is not None:
            exponent = exponent * 10 + d
            if exponent + exponent_offset > traits.exponent_max:
                if negative_exponent:
                    return -0.0 if negative else 0.0
                return -traits.inf if negative else traits.inf
            cur.pos += 1
        if negative_exponent:
            exponent = -exponent
    exponent += exponent_offset

    if not cur.at_end:
        raise ValueError(f"unexpected character {cur.char!r} in {text!r}")

    result = _scale(mantissa, exponent, traits)
    return -result if negative else result