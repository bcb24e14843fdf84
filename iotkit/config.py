"""Build-time options of the JSON engine and the version tag derived from them."""

from __future__ import annotations

import sys
from dataclasses import dataclass

VERSION = "6.21.5"
VERSION_MAJOR = 6
VERSION_MINOR = 21
VERSION_REVISION = 5

_VERSION_TAG = f"V{VERSION_MAJOR}{VERSION_MINOR}{VERSION_REVISION}"
_MAX_POSITIVE_THRESHOLD = 1e9
_SLOT_OFFSET_SIZES = (1, 2, 4)


@dataclass(frozen=True)
class Configuration:
    """Options that control number storage, parsing and serialization.

    ``use_long_long`` and ``slot_offset_size`` default to values derived from
    ``pointer_size``, the size in bytes of a pointer on the target platform.
    """

    pointer_size: int = 8
    use_double: bool = True
    use_long_long: bool | None = None
    default_nesting_limit: int = 10
    slot_offset_size: int | None = None
    enable_progmem: bool = False
    decode_unicode: bool = True
    enable_comments: bool = False
    enable_nan: bool = False
    enable_infinity: bool = False
    positive_exponentiation_threshold: float = 1e7
    negative_exponentiation_threshold: float = 1e-5
    little_endian: bool = sys.byteorder == "little"
    enable_alignment: bool = True
    tab: str = "  "
    enable_string_deduplication: bool = True
    string_buffer_size: int = 32
    debug: bool = False

    def __post_init__(self) -> None:
        if self.pointer_size < 1:
            raise ValueError(f"pointer size must be positive, got {self.pointer_size}")
        if self.use_long_long is None:
            object.__setattr__(self, "use_long_long", self.pointer_size >= 4)
        if self.slot_offset_size is None:
            if self.pointer_size <= 2:
                size = 1
            elif self.pointer_size >= 8:
                size = 4
            else:
                size = 2
            object.__setattr__(self, "slot_offset_size", size)
        if self.slot_offset_size not in _SLOT_OFFSET_SIZES:
            raise ValueError(
                f"slot offset size must be one of {_SLOT_OFFSET_SIZES}, "
                f"got {self.slot_offset_size}"
            )
        if self.positive_exponentiation_threshold > _MAX_POSITIVE_THRESHOLD:
            raise ValueError("positive exponentiation threshold cannot exceed 1e9")
        if self.default_nesting_limit < 0:
            raise ValueError("nesting limit cannot be negative")

    @property
    def integer_bits(self) -> int:
        """Width of the stored integer type."""
        return 64 if self.use_long_long else 32


def _bin2alpha(*flags: bool) -> str:
    value = 0
    for flag in flags:
        value = value << 1 | int(bool(flag))
    return chr(ord("A") + value)


def version_namespace(config: Configuration | None = None) -> str:
    """Return the tag identifying the version and the options that change layout."""
    config = config or Configuration()
    first = _bin2alpha(
        config.enable_progmem,
        config.use_long_long,
        config.use_double,
        config.enable_string_deduplication,
    )
    second = _bin2alpha(
        config.enable_nan,
        config.enable_infinity,
        config.enable_comments,
        config.decode_unicode,
    )
    return f"{_VERSION_TAG}{first}{second}{config.slot_offset_size}"