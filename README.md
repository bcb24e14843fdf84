# iotkit

Small, dependency-free building blocks for software that runs on or talks
to connected devices. Everything is plain Python and needs only the
standard library.

## Modules

- `iotkit.urlparser`: a strict, character-by-character URL parser.
  `parse_url(url, is_connect=False)` returns a `ParsedUrl` whose `fields`
  map each `UrlField` found (`SCHEMA`, `HOST`, `PORT`, `PATH`, `QUERY`,
  `FRAGMENT`, `USERINFO`) to an `(offset, length)` span; `ParsedUrl.get(field)`
  returns the text of a field or `None`, and `port` holds the numeric port.
  Invalid URLs, a schema without a host, ports above 65535 and CONNECT
  targets that are not exactly `host:port` raise `UrlParseError` (a
  `ValueError`). `parser_version()` returns the version packed as
  `major << 16 | minor << 8 | patch`.
- `iotkit.config`: `Configuration`, a frozen dataclass of options for number
  storage, parsing and serialization (double or single floats, 32- or 64-bit
  integers, NaN/Infinity support, exponent thresholds, alignment, string
  deduplication, staging buffer size, ...). `version_namespace(config)`
  returns the tag that identifies the version together with these options.
- `iotkit.floats`: `FloatTraits` for 64-bit and 32-bit floats (power-of-ten
  tables, `nan`, `inf`, `highest`, `lowest`, `highest_for(bits, signed)`),
  `make_float(mantissa, exponent, traits)`, `normalize(value, traits, config)`
  and `split_float(value, traits, config)`, which returns a `FloatParts`
  (integral, decimal, exponent, decimal places) ready for printing.
  Single precision is emulated by rounding each intermediate result.
- `iotkit.numbers`: `arithmetic_compare(lhs, rhs)` returning a
  `CompareResult` flag, `can_convert_number(value, target)` and
  `convert_number(value, target)` for fixed-width `IntType` targets (or a
  `FloatTraits`; out-of-range integers convert to 0), and
  `parse_number(text, config)`, which returns an `int` when the text is an
  integer that fits, otherwise a `float`, and raises `ValueError` for text
  that is not a number.
- `iotkit.writers`: byte sinks whose `write` takes one byte or a bytes-like
  object and returns how many bytes were accepted: `DummyWriter` (counts
  only), `StaticStringWriter` (fixed capacity, `getvalue()`), `StreamWriter`
  (forwards to a binary stream), `StringWriter` (appends to a `bytearray`
  through a staging buffer; `flush()` or use it as a context manager) and
  `CountingDecorator` (wraps a writer, keeps `count`).
- `iotkit.strings`: `JsonString` (a possibly null byte string with a size
  and an `Ownership`), `StoragePolicy`, `AdaptedString`, and
  `adapt_string(value, size)`, `string_compare(a, b)` and
  `string_equals(a, b)` for comparing `str`, `bytes`, `bytearray`,
  `memoryview` and `JsonString` values alike.
- `iotkit.memory`: `add_padding` and `is_aligned`; `MemoryPool`, a
  fixed-capacity pool that stores NUL-terminated strings from the left
  (deduplicated when enabled) and slots from the right, tracks `overflowed`,
  and can `squash()` its free space; `StringCopier`, which builds a string in
  a pool's free zone and commits it, and `StringMover`, which builds strings
  in place inside a `bytearray`.
- `iotkit.dht20`: a driver for the DHT20 I2C temperature and humidity
  sensor (`DHT20`, `DHT20Status`, `DHT20Error`, `crc8`).

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Parse a URL:

```python
from iotkit.urlparser import UrlField, parse_url

url = parse_url("http://example.com:8080/data?x=1")
print(url.get(UrlField.HOST), url.port, url.get(UrlField.PATH))
# example.com 8080 /data
```

Parse JSON numbers:

```python
from iotkit.config import Configuration
from iotkit.numbers import parse_number

print(parse_number("42"))                 # 42
print(parse_number("1.5e3", Configuration()))  # a float
```

Write into a bounded buffer and count what went through:

```python
from iotkit.writers import CountingDecorator, StaticStringWriter

sink = StaticStringWriter(4)
counter = CountingDecorator(sink)
counter.write(b"hello")
print(sink.getvalue(), counter.count)  # b'hell' 4
```

## The DHT20 driver

`DHT20(bus, clock=None, sleep=None)` talks to the sensor at address `0x38`
through any object with these methods:

- `begin()` to start the bus,
- `write(address, data) -> int`, returning 0 on success,
- `read(address, length) -> bytes`, returning what arrived.

`clock` returns milliseconds and `sleep` waits milliseconds; by default
they use `time.monotonic` and `time.sleep`, so a simulated bus and clock can
be swapped in for testing.

`read()` triggers a measurement, waits while the sensor reports it is busy,
fetches the 7-byte frame and converts it. Afterwards `temperature` (°C) and
`humidity` (%) hold the values plus `temp_offset` and `hum_offset`.
Failures raise `DHT20Error`, whose `status` is a `DHT20Status`: reading
again within one second, no answer, a short frame, an all-zero frame or a
checksum mismatch. The steps are also available separately as
`request_data()`, `read_data()` and `convert()`, together with
`read_status()`, `is_calibrated()`, `is_measuring()`, `is_idle()` and
`reset_sensor()`.

## What this package does not do

- It does not send HTTP requests: `iotkit.urlparser` only splits URLs.
- It has no JSON document type and no complete JSON parser or serializer;
  it provides the number, string, memory and writer pieces such a library
  is built from.
- It contains no I2C bus implementation; the DHT20 driver needs a bus
  object supplied by the caller.