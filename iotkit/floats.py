"""Binary floating-point helpers: power-of-ten tables, scaling and splitting.

Both double (64-bit) and single (32-bit) precision are supported; single
precision arithmetic is emulated by rounding every intermediate result.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass

from iotkit.config import Configuration

_DOUBLE_POSITIVE_POWERS = (
    0x4024000000000000,  # 1e1
    0x4059000000000000,  # 1e2
    0x40C3880000000000,  # 1e4
    0x4197D78400000000,  # 1e8
    0x4341C37937E08000,  # 1e16
    0x4693B8B5B5056E17,  # 1e32
    0x4D384F03E93FF9F5,  # 1e64
    0x5A827748F9301D32,  # 1e128
    0x75154FDD7F73BF3C,  # 1e256
)

_DOUBLE_NEGATIVE_POWERS = (
    0x3FB999999999999A,  # 1e-1
    0x3F847AE147AE147B,  # 1e-2
    0x3F1A36E2EB1C432D,  # 1e-4
    0x3E45798EE2308C3A,  # 1e-8
    0x3C9CD2B297D889BC,  # 1e-16
    0x3949F623D5A8A733,  # 1e-32
    0x32A50FFD44F4A73D,  # 1e-64
    0x255BBA08CF8C979D,  # 1e-128
    0x0AC8062864AC6F43,  # 1e-256
)

_SINGLE_POSITIVE_POWERS = (
    0x41200000,  # 1e1f
    0x42C80000,  # 1e2f
    0x461C4000,  # 1e4f
    0x4CBEBC20,  # 1e8f
    0x5A0E1BCA,  # 1e16f
    0x749DC5AE,  # 1e32f
)

_SINGLE_NEGATIVE_POWERS = (
    0x3DCCCCCD,  # 1e-1f
    0x3C23D70A,  # 1e-2f
    0x38D1B717,  # 1e-4f
    0x322BCC77,  # 1e-8f
    0x24E69595,  # 1e-16f
    0x0A4FB11F,  # 1e-32f
)

_HIGHEST_FOR = {
    64: {
        (64, True): 0x43DFFFFFFFFFFFFF,
        (64, False): 0x43EFFFFFFFFFFFFF,
    },
    32: {
        (32, True): 0x4EFFFFFF,
        (32, False): 0x4F7FFFFF,
        (64, True): 0x5EFFFFFF,
        (64, False): 0x5F7FFFFF,
    },
}

_LAYOUT = {
    # bits: (mantissa bits, max decimal exponent, nan, inf, highest, lowest)
    64: (52, 308, 0x7FF8000000000000, 0x7FF0000000000000,
         0x7FEFFFFFFFFFFFFF, 0xFFEFFFFFFFFFFFFF),
    32: (23, 38, 0x7FC00000, 0x7F800000, 0x7F7FFFFF, 0xFF7FFFFF),
}


@dataclass(frozen=True)
class FloatTraits:
    """Properties of a binary floating-point format of ``bits`` width."""

    bits: int = 64

    def __post_init__(self) -> None:
        if self.bits not in _LAYOUT:
            raise ValueError(f"unsupported float width: {self.bits}")

    @property
    def mantissa_bits(self) -> int:
        return _LAYOUT[self.bits][0]

    @property
    def mantissa_max(self) -> int:
        return (1 << self.mantissa_bits) - 1

    @property
    def exponent_max(self) -> int:
        return _LAYOUT[self.bits][1]

    @property
    def nan(self) -> float:
        return self._forge(_LAYOUT[self.bits][2])

    @property
    def inf(self) -> float:
        return self._forge(_LAYOUT[self.bits][3])

    @property
    def highest(self) -> float:
        return self._forge(_LAYOUT[self.bits][4])

    @property
    def lowest(self) -> float:
        return self._forge(_LAYOUT[self.bits][5])

    def positive_powers_of_ten(self) -> tuple[float, ...]:
        """Return 1e1, 1e2, 1e4, 1e8, ... in this format."""
        table = _DOUBLE_POSITIVE_POWERS if self.bits == 64 else _SINGLE_POSITIVE_POWERS
        return tuple(self._forge(bits) for bits in table)

    def negative_powers_of_ten(self) -> tuple[float, ...]:
        """Return 1e-1, 1e-2, 1e-4, 1e-8, ... in this format."""
        table = _DOUBLE_NEGATIVE_POWERS if self.bits == 64 else _SINGLE_NEGATIVE_POWERS
        return tuple(self._forge(bits) for bits in table)

    def highest_for(self, bits: int, signed: bool) -> float:
        """Return the largest value of this format that fits an integer type."""
        try:
            return self._forge(_HIGHEST_FOR[self.bits][(bits, bool(signed))])
        except KeyError:
            raise ValueError(
                f"no bound for a {bits}-bit integer in a {self.bits}-bit float"
            ) from None

    def _forge(self, bits: int) -> float:
        if self.bits == 64:
            return struct.unpack("<d", struct.pack("<Q", bits))[0]
        return struct.unpack("<f", struct.pack("<I", bits))[0]

    def _round(self, value: float) -> float:
        if self.bits == 64 or not math.isfinite(value):
            return value
        try:
            return struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError:
            return math.copysign(math.inf, value)


DOUBLE = FloatTraits(64)
SINGLE = FloatTraits(32)


def _traits_for(traits: FloatTraits | None, config: Configuration | None) -> FloatTraits:
    if traits is not None:
        return traits
    config = config or Configuration()
    return DOUBLE if config.use_double else SINGLE


@dataclass(frozen=True)
class FloatParts:
    """A positive float split into the pieces needed to print it."""

    integral: int
    decimal: int
    exponent: int
    decimal_places: int


def make_float(mantissa: float, exponent: int, traits: FloatTraits = DOUBLE) -> float:
    """Return ``mantissa * 10 ** exponent`` using the binary power table."""
    powers = (
        traits.positive_powers_of_ten()
        if exponent > 0
        else traits.negative_powers_of_ten()
    )
    e = abs(exponent)
    if e >= 1 << len(powers):
        raise ValueError(f"exponent {exponent} is out of range")
    result = traits._round(float(mantissa))
    for power in powers:
        if e == 0:
            break
        if e & 1:
            result = traits._round(result * power)
        e >>= 1
    return result


def normalize(
    value: float,
    traits: FloatTraits | None = None,
    config: Configuration | None = None,
) -> tuple[float, int]:
    """Scale very large or very small values toward 1.

    Returns the scaled value and the power of ten that was removed.
    """
    config = config or Configuration()
    traits = _traits_for(traits, config)
    positive = traits.positive_powers_of_ten()
    negative = traits.negative_powers_of_ten()

    value = traits._round(value)
    powers_of_10 = 0
    index = len(positive) - 1
    bit = 1 << index

    if value >= config.positive_exponentiation_threshold:
        while index >= 0:
            if value >= positive[index]:
                value = traits._round(value * negative[index])
                powers_of_10 += bit
            bit >>= 1
            index -= 1

    if 0 < value <= config.negative_exponentiation_threshold:
        while index >= 0:
            if value < traits._round(negative[index] * 10):
                value = traits._round(value * positive[index])
                powers_of_10 -= bit
            bit >>= 1
            index -= 1

    return value, powers_of_10


def split_float(
    value: float,
    traits: FloatTraits | None = None,
    config: Configuration | None = None,
) -> FloatParts:
    """Split a finite, non-negative value into integral and decimal parts."""
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"cannot split {value!r}")
    config = config or Configuration()
    traits = _traits_for(traits, config)

    if traits.bits == 64:
        max_decimal, places = 1_000_000_000, 9
    else:
        max_decimal, places = 1_000_000, 6

    value, exponent = normalize(value, traits, config)

    integral = int(value)
    tmp = integral
    while tmp >= 10:
        max_decimal //= 10
        places -= 1
        tmp //= 10

    remainder = traits._round((value - integral) * max_decimal)
    decimal = int(remainder)
    remainder = traits._round(remainder - decimal)

    decimal += int(remainder * 2)
    if decimal >= max_decimal:
        decimal = 0
        integral += 1
        if exponent and integral >= 10:
            exponent += 1
            integral = 1

    while decimal % 10 == 0 and places > 0:
        decimal //= 10
        places -= 1

    return FloatParts(integral, decimal, exponent, places)