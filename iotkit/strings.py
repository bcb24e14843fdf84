"""String values and the adapters that let different string sources be
compared, searched and stored in the same way."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Ownership(enum.Enum):
    """Whether a string's characters belong to the document or to the caller."""

    COPIED = "copied"
    LINKED = "linked"


def _strlen(data: bytes) -> int:
    end = data.find(b"\0")
    return len(data) if end < 0 else end


class JsonString:
    """A possibly null byte string with a known length and ownership.

    ``data`` may be ``str`` (encoded as UTF-8) or bytes-like. Without an
    explicit ``size`` the string stops at the first NUL byte.
    """

    __slots__ = ("_data", "_size", "_ownership")

    def __init__(
        self,
        data: str | bytes | bytearray | memoryview | None = None,
        size: int | None = None,
        ownership: Ownership = Ownership.LINKED,
    ) -> None:
        if isinstance(data, str):
            raw: bytes | None = data.encode("utf-8")
        elif data is None:
            raw = None
        else:
            raw = bytes(data)

        if size is None:
            size = 0 if raw is None else _strlen(raw)
        elif size < 0:
            raise ValueError("size cannot be negative")
        elif raw is not None and size > len(raw):
            raise ValueError(f"size {size} exceeds the {len(raw)} bytes given")

        self._data = None if raw is None else raw[:size]
        self._size = size
        self._ownership = Ownership(ownership)

    @property
    def data(self) -> bytes | None:
        """The characters of the string, or ``None`` for a null string."""
        return self._data

    @property
    def size(self) -> int:
        return self._size

    @property
    def ownership(self) -> Ownership:
        return self._ownership

    @property
    def is_null(self) -> bool:
        return self._data is None

    @property
    def is_linked(self) -> bool:
        """True if the string is stored by reference rather than by copy."""
        return self._ownership is Ownership.LINKED

    def __bool__(self) -> bool:
        return self._data is not None

    def __len__(self) -> int:
        return self._size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonString):
            return NotImplemented
        if self._size != other._size:
            return False
        if self._data is None and other._data is None:
            return True
        if self._data is None or other._data is None:
            return False
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __str__(self) -> str:
        if self._data is None:
            return ""
        return self._data.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return (
            f"JsonString({self._data!r}, size={self._size}, "
            f"ownership={self._ownership.name})"
        )


class StoragePolicy(enum.Enum):
    """How a string must be kept when it is stored in a document."""

    LINK = "link"
    COPY = "copy"


@dataclass(frozen=True)
class AdaptedString:
    """A uniform view of a string source.

    ``zero_terminated`` strings have their length found by the first NUL
    byte; sized strings carry an explicit length.
    """

    data: bytes | None
    size: int
    policy: StoragePolicy
    zero_terminated: bool = False

    @property
    def is_null(self) -> bool:
        return self.data is None

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, index: int) -> int:
        if self.data is None:
            raise ValueError("null string has no characters")
        return self.data[index]


def _sized(data: bytes | None, size: int | None) -> AdaptedString:
    if data is None:
        return AdaptedString(None, size or 0, StoragePolicy.COPY)
    if size is None:
        size = len(data)
    if size < 0:
        raise ValueError("size cannot be negative")
    if size > len(data):
        raise ValueError(f"size {size} exceeds the {len(data)} bytes given")
    return AdaptedString(data[:size], size, StoragePolicy.COPY)


def _zero_terminated(data: bytes, policy: StoragePolicy) -> AdaptedString:
    text = data[: _strlen(data)]
    return AdaptedString(text, len(text), policy, zero_terminated=True)


def adapt_string(value: object, size: int | None = None) -> AdaptedString:
    """Wrap a string source in an :class:`AdaptedString`.

    Without ``size``: ``str`` is a sized string that must be copied;
    ``bytes`` is a NUL-terminated constant that may be linked;
    ``bytearray`` and ``memoryview`` are NUL-terminated buffers that must be
    copied; a :class:`JsonString` keeps its length and is linked only if it
    was linked. With ``size`` the first ``size`` bytes are taken as a sized
    string to copy.
    """
    if isinstance(value, AdaptedString):
        if size is None:
            return value
        return _sized(value.data, size)

    if value is None:
        if size is None:
            return AdaptedString(None, 0, StoragePolicy.LINK, zero_terminated=True)
        return _sized(None, size)

    if isinstance(value, JsonString):
        if size is not None:
            return _sized(value.data, size)
        policy = StoragePolicy.LINK if value.is_linked else StoragePolicy.COPY
        return AdaptedString(value.data, value.size, policy)

    if isinstance(value, str):
        return _sized(value.encode("utf-8"), size)

    if isinstance(value, bytes):
        if size is not None:
            return _sized(value, size)
        return _zero_terminated(value, StoragePolicy.LINK)

    if isinstance(value, (bytearray, memoryview)):
        data = bytes(value)
        if size is not None:
            return _sized(data, size)
        return _zero_terminated(data, StoragePolicy.COPY)

    raise TypeError(f"cannot use {type(value).__name__} as a string")


def _adapted(value: object) -> AdaptedString:
    adapted = adapt_string(value)
    if adapted.is_null:
        raise ValueError("cannot compare a null string")
    return adapted


def _signed_char(byte: int) -> int:
    return byte - 256 if byte >= 128 else byte


def string_compare(a: object, b: object) -> int:
    """Return a negative, zero or positive number as ``a`` sorts before,
    equal to or after ``b``.

    Two NUL-terminated strings compare their bytes unsigned; any other pair
    compares them as signed characters.
    """
    s1, s2 = _adapted(a), _adapted(b)
    d1, d2 = s1.data or b"", s2.data or b""

    if s1.zero_terminated and s2.zero_terminated:
        for x, y in zip(d1, d2):
            if x != y:
                return x - y
        if len(d1) < len(d2):
            return -d2[len(d1)]
        if len(d1) > len(d2):
            return d1[len(d2)]
        return 0

    for x, y in zip(d1, d2):
        if x != y:
            return _signed_char(x) - _signed_char(y)
    if s1.size < s2.size:
        return -1
    if s1.size > s2.size:
        return 1
    return 0


def string_equals(a: object, b: object) -> bool:
    """Return True if both strings hold the same bytes."""
    s1, s2 = _adapted(a), _adapted(b)
    return s1.size == s2.size and s1.data == s2.data