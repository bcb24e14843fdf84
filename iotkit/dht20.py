"""Driver for the DHT20 I2C temperature and humidity sensor.

The sensor is reached through any object that implements :class:`I2CBus`.
Time is taken from an injectable millisecond clock so that the driver can
run against real hardware adapters as well as simulated ones.
"""

from __future__ import annotations

import enum
import time
from typing import Callable, Protocol

ADDRESS = 0x38
LIB_VERSION = "0.2.2"

_FRAME_LENGTH = 7
_MIN_READ_INTERVAL_MS = 1000
_UINT32_MASK = 0xFFFFFFFF
_HUMIDITY_SCALE = 9.5367431640625e-5  # 100 / 2**20
_TEMPERATURE_SCALE = 1.9073486328125e-4  # 200 / 2**20
_NO_RESET_NEEDED = 255


class I2CBus(Protocol):
    """The subset of an I2C bus the driver relies on."""

    def begin(self) -> None:
        """Initialise the bus."""

    def write(self, address: int, data: bytes) -> int:
        """Send ``data`` to ``address``; return 0 on success, else an error code."""

    def read(self, address: int, length: int) -> bytes:
        """Request up to ``length`` bytes from ``address``; return what arrived."""


class DHT20Status(enum.IntEnum):
    """Result codes of sensor operations."""

    OK = 0
    ERROR_CHECKSUM = -10
    ERROR_CONNECT = -11
    MISSING_BYTES = -12
    ERROR_BYTES_ALL_ZERO = -13
    ERROR_READ_TIMEOUT = -14
    ERROR_LASTREAD = -15


class DHT20Error(Exception):
    """Raised when a sensor operation fails."""

    def __init__(self, status: DHT20Status, message: str | None = None) -> None:
        self.status = DHT20Status(status)
        super().__init__(message or self.status.name)


def crc8(data: bytes) -> int:
    """CRC-8 with polynomial 0x31 and initial value 0xFF, as used by the sensor."""
    crc = 0xFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x80:
                crc = ((crc << 1) ^ 0x31) & 0xFF
            else:
                crc = (crc << 1) & 0xFF
    return crc


def _default_clock() -> int:
    return int(time.monotonic() * 1000)


def _default_sleep(milliseconds: int) -> None:
    time.sleep(milliseconds / 1000)


class DHT20:
    """A DHT20 sensor at the fixed address 0x38.

    ``clock`` returns the current time in milliseconds and ``sleep`` waits
    the given number of milliseconds.
    """

    address = ADDRESS

    def __init__(
        self,
        bus: I2CBus,
        clock: Callable[[], int] | None = None,
        sleep: Callable[[int], None] | None = None,
    ) -> None:
        self._bus = bus
        self._clock = clock or _default_clock
        self._sleep = sleep or _default_sleep
        self._humidity = 0.0
        self._temperature = 0.0
        self.hum_offset = 0.0
        self.temp_offset = 0.0
        self._status = 0
        self._last_request = 0
        self._last_read = 0
        self._bits = bytes(_FRAME_LENGTH)

    def _now(self) -> int:
        return int(self._clock()) & _UINT32_MASK

    # connection

    def begin(self) -> bool:
        """Start the bus and report whether the sensor answers."""
        self._bus.begin()
        return self.is_connected()

    def is_connected(self) -> bool:
        return self._bus.write(ADDRESS, b"") == 0

    # measurement

    def request_data(self) -> int:
        """Trigger a measurement; return the bus status (0 on success)."""
        self.reset_sensor()
        rv = self._bus.write(ADDRESS, bytes((0xAC, 0x33, 0x00)))
        self._last_request = self._now()
        return rv

    def read_data(self) -> int:
        """Fetch the raw measurement frame; return the number of bytes read."""
        data = bytes(self._bus.read(ADDRESS, _FRAME_LENGTH))[:_FRAME_LENGTH]
        if not data:
            raise DHT20Error(DHT20Status.ERROR_CONNECT, "sensor did not answer")
        if len(data) < _FRAME_LENGTH:
            raise DHT20Error(
                DHT20Status.MISSING_BYTES,
                f"expected {_FRAME_LENGTH} bytes, got {len(data)}",
            )
        self._bits = data
        if not any(data):
            raise DHT20Error(DHT20Status.ERROR_BYTES_ALL_ZERO, "sensor sent only zeros")
        self._last_read = self._now()
        return len(data)

    def convert(self) -> None:
        """Turn the raw frame into temperature and humidity, then check its CRC.

        The values are stored even when the checksum does not match.
        """
        bits = self._bits
        self._status = bits[0]

        raw = (bits[1] << 12) | (bits[2] << 4) | (bits[3] >> 4)
        self._humidity = raw * _HUMIDITY_SCALE

        raw = ((bits[3] & 0x0F) << 16) | (bits[4] << 8) | bits[5]
        self._temperature = raw * _TEMPERATURE_SCALE - 50

        if crc8(bits[:6]) != bits[6]:
            raise DHT20Error(DHT20Status.ERROR_CHECKSUM, "checksum mismatch")

    def read(self) -> None:
        """Measure and convert, waiting until the sensor is done.

        Raises :class:`DHT20Error` when called within a second of the last
        successful read or when any step fails.
        """
        if (self._now() - self._last_read) & _UINT32_MASK < _MIN_READ_INTERVAL_MS:
            raise DHT20Error(DHT20Status.ERROR_LASTREAD, "read at most once per second")
        self.request_data()
        while self.is_measuring():
            pass
        self.read_data()
        self.convert()

    # values

    @property
    def humidity(self) -> float:
        """Relative humidity in percent, offset included."""
        return self._humidity + self.hum_offset

    @property
    def temperature(self) -> float:
        """Temperature in degrees Celsius, offset included."""
        return self._temperature + self.temp_offset

    @property
    def internal_status(self) -> int:
        """Status byte of the last converted frame."""
        return self._status

    @property
    def last_read(self) -> int:
        return self._last_read

    @property
    def last_request(self) -> int:
        return self._last_request

    # status

    def read_status(self) -> int:
        data = bytes(self._bus.read(ADDRESS, 1))
        self._sleep(1)
        return data[0] if data else 0xFF

    def is_calibrated(self) -> bool:
        return self.read_status() & 0x08 == 0x08

    def is_measuring(self) -> bool:
        return self.read_status() & 0x80 == 0x80

    def is_idle(self) -> bool:
        return self.read_status() & 0x80 == 0x00

    # reset

    def reset_sensor(self) -> int:
        """Reset the calibration registers if the sensor asks for it.

        Returns 255 when no reset was needed, otherwise the number of
        registers reset (3 when all succeeded).
        """
        if self.read_status() & 0x18 == 0x18:
            return _NO_RESET_NEEDED
        count = sum(self._reset_register(reg) for reg in (0x1B, 0x1C, 0x1E))
        self._sleep(10)
        return count

    def _reset_register(self, reg: int) -> bool:
        if self._bus.write(ADDRESS, bytes((reg, 0x00, 0x00))) != 0:
            return False
        self._sleep(5)
        value = bytes(self._bus.read(ADDRESS, 3))[:3].ljust(3, b"\0")
        self._sleep(10)
        if self._bus.write(ADDRESS, bytes((0xB0 | reg, value[1], value[2]))) != 0:
            return False
        self._sleep(5)
        return True