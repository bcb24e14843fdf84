"""Byte sinks used by serializers.

Every writer has a ``write`` method that takes one byte (an ``int``) or a
bytes-like object and returns the number of bytes it accepted.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol

from iotkit.config import Configuration

Data = int | bytes | bytearray | memoryview


class Writer(Protocol):
    def write(self, data: Data) -> int: ...


def _as_bytes(data: Data) -> bytes:
    if isinstance(data, int):
        if not 0 <= data <= 0xFF:
            raise ValueError(f"byte value out of range: {data}")
        return bytes((data,))
    return bytes(data)


class DummyWriter:
    """Discards everything but reports it as written; used for measuring."""

    def write(self, data: Data) -> int:
        return len(_as_bytes(data))


class StaticStringWriter:
    """Writes into a fixed-capacity buffer, dropping what does not fit."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity cannot be negative")
        self.capacity = capacity
        self._buffer = bytearray()

    def write(self, data: Data) -> int:
        room = self.capacity - len(self._buffer)
        chunk = _as_bytes(data)[:room]
        self._buffer += chunk
        return len(chunk)

    def getvalue(self) -> bytes:
        """Return what has been written so far."""
        return bytes(self._buffer)


class StreamWriter:
    """Forwards bytes to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def write(self, data: Data) -> int:
        chunk = _as_bytes(data)
        written = self._stream.write(chunk)
        return len(chunk) if written is None else int(written)


class StringWriter:
    """Appends to a growable byte string through a small staging buffer.

    Bytes reach ``destination`` when the buffer fills up, on :meth:`flush`,
    or when the writer is used as a context manager and the block ends.
    """

    def __init__(
        self, destination: bytearray | None = None, buffer_size: int | None = None
    ) -> None:
        if buffer_size is None:
            buffer_size = Configuration().string_buffer_size
        if buffer_size < 2:
            raise ValueError("buffer size must be at least 2")
        self.destination = destination if destination is not None else bytearray()
        self._capacity = buffer_size
        self._buffer = bytearray()

    def write(self, data: Data) -> int:
        chunk = _as_bytes(data)
        for byte in chunk:
            if len(self._buffer) + 1 >= self._capacity:
                self.flush()
            self._buffer.append(byte)
        return len(chunk)

    def flush(self) -> int:
        """Move buffered bytes to the destination; return what remains buffered."""
        self.destination += self._buffer
        self._buffer.clear()
        return len(self._buffer)

    def __enter__(self) -> StringWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.flush()


class CountingDecorator:
    """Wraps a writer and counts the bytes it accepted."""

    def __init__(self, writer: Writer) -> None:
        self._writer = writer
        self.count = 0

    def write(self, data: Data) -> int:
        written = self._writer.write(data)
        self.count += written
        return written