"""A fixed-capacity memory pool and the helpers that fill it with strings.

Strings grow from the start of the pool, fixed-size slots from its end;
the pool is full when the two meet. Locations in the pool are integer
offsets.
"""

from __future__ import annotations

from iotkit.config import Configuration
from iotkit.strings import AdaptedString, JsonString, Ownership, adapt_string


def _check_pointer_size(pointer_size: int) -> None:
    if pointer_size < 1 or pointer_size & (pointer_size - 1):
        raise ValueError(f"pointer size must be a power of two, got {pointer_size}")


def add_padding(size: int, pointer_size: int = 8) -> int:
    """Round ``size`` up to a multiple of ``pointer_size``."""
    _check_pointer_size(pointer_size)
    if size < 0:
        raise ValueError("size cannot be negative")
    mask = pointer_size - 1
    return (size + mask) & ~mask


def is_aligned(value: int, pointer_size: int = 8) -> bool:
    """Return True if ``value`` is a multiple of ``pointer_size``."""
    _check_pointer_size(pointer_size)
    return value & (pointer_size - 1) == 0


def _as_bytes(text: str | bytes | bytearray | memoryview | int) -> bytes:
    if isinstance(text, str):
        return text.encode("utf-8")
    if isinstance(text, int):
        if not 0 <= text <= 0xFF:
            raise ValueError(f"byte value out of range: {text}")
        return bytes((text,))
    return bytes(text)


class MemoryPool:
    """A pool of ``capacity`` bytes holding strings on the left and slots on
    the right."""

    def __init__(self, capacity: int, config: Configuration | None = None) -> None:
        if capacity < 0:
            raise ValueError("capacity cannot be negative")
        self._config = config or Configuration()
        self._buffer = bytearray(capacity)
        self._left = 0
        self._right = capacity
        self._end = capacity
        self._overflowed = False

    @property
    def capacity(self) -> int:
        return self._end

    @property
    def size(self) -> int:
        """Number of bytes in use."""
        return self._left + self._end - self._right

    @property
    def overflowed(self) -> bool:
        """True once an allocation has failed for lack of room."""
        return self._overflowed

    @property
    def buffer(self) -> bytes:
        """A snapshot of the pool's bytes."""
        return bytes(self._buffer[: self._end])

    def _pad(self, value: int) -> int:
        if not self._config.enable_alignment:
            return value
        return add_padding(value, self._config.pointer_size)

    def _put(self, offset: int, data: bytes) -> None:
        self._buffer[offset : offset + len(data)] = data

    def _read(self, offset: int, length: int) -> bytes:
        return bytes(self._buffer[offset : offset + length])

    def _find_string(self, target: bytes) -> int | None:
        n = len(target)
        start = 0
        while start + n < self._left:
            if self._buffer[start + n] == 0 and self._buffer[start : start + n] == target:
                return start
            terminator = self._buffer.find(0, start, self._left)
            if terminator < 0:
                break
            start = terminator + 1
        return None

    def save_string(self, string: object) -> int | None:
        """Copy a string with its terminator into the pool.

        Returns its offset, or ``None`` for a null string or when the pool
        is full. An identical string already in the pool is reused when
        deduplication is enabled.
        """
        adapted = string if isinstance(string, AdaptedString) else adapt_string(string)
        if adapted.is_null:
            return None
        data = adapted.data or b""

        if self._config.enable_string_deduplication:
            existing = self._find_string(data)
            if existing is not None:
                return existing

        n = adapted.size
        if not self.can_alloc(n + 1):
            self._overflowed = True
            return None
        offset = self._left
        self._put(offset, data + b"\0")
        self._left += n + 1
        return offset

    def alloc_variant(self, slot_size: int) -> int | None:
        """Reserve ``slot_size`` bytes at the right end; return their offset."""
        if slot_size <= 0:
            raise ValueError("slot size must be positive")
        if not self.can_alloc(slot_size):
            self._overflowed = True
            return None
        self._right -= slot_size
        return self._right

    def get_free_zone(self) -> tuple[int, int]:
        """Return the offset and size of the unused middle of the pool."""
        return self._left, self._right - self._left

    def save_string_from_free_zone(self, length: int) -> int:
        """Commit the ``length`` bytes written at the start of the free zone
        as a string and return its offset."""
        if length < 0 or self._left + length >= self._right:
            raise ValueError(f"no room to save a string of {length} bytes")

        if self._config.enable_string_deduplication:
            existing = self._find_string(self._read(self._left, length))
            if existing is not None:
                return existing

        offset = self._left
        self._left += length
        self._buffer[self._left] = 0
        self._left += 1
        return offset

    def mark_as_overflowed(self) -> None:
        self._overflowed = True

    def clear(self) -> None:
        """Forget everything stored and reset the overflow flag."""
        self._left = 0
        self._right = self._end
        self._overflowed = False

    def can_alloc(self, size: int) -> bool:
        return self._left + size <= self._right

    def squash(self) -> int:
        """Move the slots down against the strings and shrink the pool.

        Returns the number of bytes reclaimed. Slot offsets obtained before
        the call move down by that amount.
        """
        new_right = self._pad(self._left)
        if new_right >= self._right:
            return 0
        right_size = self._end - self._right
        self._buffer[new_right : new_right + right_size] = self._buffer[
            self._right : self._end
        ]
        reclaimed = self._right - new_right
        self._right = new_right
        self._end = new_right + right_size
        del self._buffer[self._end :]
        return reclaimed


class StringCopier:
    """Builds a string in a pool's free zone, then commits it."""

    def __init__(self, pool: MemoryPool) -> None:
        self._pool = pool
        self._start: int | None = None
        self._size = 0
        self._capacity = 0

    @property
    def size(self) -> int:
        return self._size

    def start_string(self) -> None:
        self._start, self._capacity = self._pool.get_free_zone()
        self._size = 0
        if self._capacity == 0:
            self._pool.mark_as_overflowed()

    def _require_started(self) -> int:
        if self._start is None:
            raise RuntimeError("start_string() must be called first")
        return self._start

    def append(self, text: str | bytes | bytearray | int) -> None:
        """Add characters; those that do not fit mark the pool overflowed."""
        start = self._require_started()
        data = _as_bytes(text)
        room = max(self._capacity - 1 - self._size, 0)
        chunk = data[:room]
        self._pool._put(start + self._size, chunk)
        self._size += len(chunk)
        if len(chunk) < len(data):
            self._pool.mark_as_overflowed()

    def save(self) -> JsonString:
        """Commit the string to the pool and return it."""
        self._require_started()
        if self._size >= self._capacity:
            raise RuntimeError("no room for the string terminator")
        offset = self._pool.save_string_from_free_zone(self._size)
        return JsonString(self._pool._read(offset, self._size), self._size, Ownership.COPIED)

    def str(self) -> JsonString:
        """Return the string built so far without committing it."""
        start = self._require_started()
        if self._size >= self._capacity:
            raise RuntimeError("no room for the string terminator")
        self._pool._put(start + self._size, b"\0")
        return JsonString(self._pool._read(start, self._size), self._size, Ownership.COPIED)

    def is_valid(self) -> bool:
        return not self._pool.overflowed


class StringMover:
    """Builds strings in place inside the buffer being parsed."""

    def __init__(self, buffer: bytearray, position: int = 0) -> None:
        if not 0 <= position <= len(buffer):
            raise ValueError("position is outside the buffer")
        self._buffer = buffer
        self._write = position
        self._start: int | None = None

    @property
    def size(self) -> int:
        return 0 if self._start is None else self._write - self._start

    def start_string(self) -> None:
        self._start = self._write

    def append(self, text: str | bytes | bytearray | int) -> None:
        data = _as_bytes(text)
        end = self._write + len(data)
        if end > len(self._buffer):
            raise IndexError("string runs past the end of the buffer")
        self._buffer[self._write : end] = data
        self._write = end

    def str(self) -> JsonString:
        """Terminate the string in place and return it."""
        if self._start is None:
            raise RuntimeError("start_string() must be called first")
        if self._write >= len(self._buffer):
            raise IndexError("no room for the string terminator")
        self._buffer[self._write] = 0
        size = self._write - self._start
        return JsonString(bytes(self._buffer[self._start : self._write]), size, Ownership.LINKED)

    def save(self) -> JsonString:
        """Terminate the string and move past its terminator."""
        result = self.str()
        self._write += 1
        return result

    def is_valid(self) -> bool:
        return True