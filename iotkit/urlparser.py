"""Strict URL splitter for HTTP request targets.

A URL is walked one character at a time through a small state machine that
records where each component (schema, host, port, path, query, fragment and
userinfo) starts and how long it is. Any character that does not fit the
current state makes the whole URL invalid.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Mapping

VERSION_MAJOR = 2
VERSION_MINOR = 7
VERSION_PATCH = 1

_MAX_PORT = 0xFFFF


class UrlField(enum.IntEnum):
    """Components that can be found in a URL."""

    SCHEMA = 0
    HOST = 1
    PORT = 2
    PATH = 3
    QUERY = 4
    FRAGMENT = 5
    USERINFO = 6


class UrlParseError(ValueError):
    """Raised when a URL cannot be parsed."""


@dataclass(frozen=True)
class ParsedUrl:
    """Result of :func:`parse_url`.

    ``fields`` maps each component found to its ``(offset, length)`` span in
    ``url``. ``port`` is the numeric port, or ``None`` when absent.
    """

    url: str
    fields: Mapping[UrlField, tuple[int, int]] = field(default_factory=dict)
    port: int | None = None

    def get(self, field: UrlField) -> str | None:
        """Return the text of a component, or ``None`` if it is absent."""
        span = self.fields.get(UrlField(field))
        if span is None:
            return None
        offset, length = span
        return self.url[offset : offset + length]


class _State(enum.Enum):
    DEAD = enum.auto()
    SPACES_BEFORE_URL = enum.auto()
    SCHEMA = enum.auto()
    SCHEMA_SLASH = enum.auto()
    SCHEMA_SLASH_SLASH = enum.auto()
    SERVER_START = enum.auto()
    SERVER = enum.auto()
    SERVER_WITH_AT = enum.auto()
    PATH = enum.auto()
    QUERY_STRING_START = enum.auto()
    QUERY_STRING = enum.auto()
    FRAGMENT_START = enum.auto()
    FRAGMENT = enum.auto()


class _HostState(enum.Enum):
    DEAD = enum.auto()
    USERINFO_START = enum.auto()
    USERINFO = enum.auto()
    HOST_START = enum.auto()
    V6_START = enum.auto()
    HOST = enum.auto()
    V6 = enum.auto()
    V6_END = enum.auto()
    V6_ZONE_START = enum.auto()
    V6_ZONE = enum.auto()
    PORT_START = enum.auto()
    PORT = enum.auto()


_MARKS = frozenset("-_.!~*'()")
_USERINFO_EXTRA = frozenset("%;:&=+$,")
_ZONE_EXTRA = frozenset("%.-_~")


def _is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_num(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_alphanum(ch: str) -> bool:
    return _is_alpha(ch) or _is_num(ch)


def _is_hex(ch: str) -> bool:
    return _is_num(ch) or ("a" <= ch <= "f") or ("A" <= ch <= "F")


def _is_userinfo_char(ch: str) -> bool:
    return _is_alphanum(ch) or ch in _MARKS or ch in _USERINFO_EXTRA


def _is_url_char(ch: str) -> bool:
    # Printable ASCII except space, '#' and '?'.
    return "!" <= ch <= "~" and ch not in "#?"


def _is_host_char(ch: str) -> bool:
    return _is_alphanum(ch) or ch in ".-"


def _next_url_state(s: _State, ch: str) -> _State:
    if ch in " \r\n\t\f":
        return _State.DEAD

    if s is _State.SPACES_BEFORE_URL:
        if ch in "/*":
            return _State.PATH
        if _is_alpha(ch):
            return _State.SCHEMA
    elif s is _State.SCHEMA:
        if _is_alpha(ch):
            return s
        if ch == ":":
            return _State.SCHEMA_SLASH
    elif s is _State.SCHEMA_SLASH:
        if ch == "/":
            return _State.SCHEMA_SLASH_SLASH
    elif s is _State.SCHEMA_SLASH_SLASH:
        if ch == "/":
            return _State.SERVER_START
    elif s in (_State.SERVER_WITH_AT, _State.SERVER_START, _State.SERVER):
        if ch == "@":
            return _State.DEAD if s is _State.SERVER_WITH_AT else _State.SERVER_WITH_AT
        if ch == "/":
            return _State.PATH
        if ch == "?":
            return _State.QUERY_STRING_START
        if _is_userinfo_char(ch) or ch in "[]":
            return _State.SERVER
    elif s is _State.PATH:
        if _is_url_char(ch):
            return s
        if ch == "?":
            return _State.QUERY_STRING_START
        if ch == "#":
            return _State.FRAGMENT_START
    elif s in (_State.QUERY_STRING_START, _State.QUERY_STRING):
        if _is_url_char(ch) or ch == "?":
            return _State.QUERY_STRING
        if ch == "#":
            return _State.FRAGMENT_START
    elif s is _State.FRAGMENT_START:
        if _is_url_char(ch) or ch == "?":
            return _State.FRAGMENT
        if ch == "#":
            return s
    elif s is _State.FRAGMENT:
        if _is_url_char(ch) or ch in "?#":
            return s

    return _State.DEAD


def _next_host_state(s: _HostState, ch: str) -> _HostState:
    if s in (_HostState.USERINFO, _HostState.USERINFO_START):
        if ch == "@":
            return _HostState.HOST_START
        if _is_userinfo_char(ch):
            return _HostState.USERINFO
    elif s is _HostState.HOST_START:
        if ch == "[":
            return _HostState.V6_START
        if _is_host_char(ch):
            return _HostState.HOST
    elif s in (_HostState.HOST, _HostState.V6_END):
        if s is _HostState.HOST and _is_host_char(ch):
            return _HostState.HOST
        if ch == ":":
            return _HostState.PORT_START
    elif s in (_HostState.V6, _HostState.V6_START):
        if s is _HostState.V6 and ch == "]":
            return _HostState.V6_END
        if _is_hex(ch) or ch in ":.":
            return _HostState.V6
        if s is _HostState.V6 and ch == "%":
            return _HostState.V6_ZONE_START
    elif s in (_HostState.V6_ZONE, _HostState.V6_ZONE_START):
        if s is _HostState.V6_ZONE and ch == "]":
            return _HostState.V6_END
        if _is_alphanum(ch) or ch in _ZONE_EXTRA:
            return _HostState.V6_ZONE
    elif s in (_HostState.PORT, _HostState.PORT_START):
        if _is_num(ch):
            return _HostState.PORT
    return _HostState.DEAD


_BAD_HOST_END_STATES = frozenset(
    {
        _HostState.HOST_START,
        _HostState.V6_START,
        _HostState.V6,
        _HostState.V6_ZONE_START,
        _HostState.V6_ZONE,
        _HostState.PORT_START,
        _HostState.USERINFO,
        _HostState.USERINFO_START,
    }
)


def _split_host(url: str, spans: dict[UrlField, list[int]], found_at: bool) -> None:
    """Split the raw host span into userinfo, host and port spans."""
    host = spans[UrlField.HOST]
    start, end = host[0], host[0] + host[1]
    host[1] = 0

    s = _HostState.USERINFO_START if found_at else _HostState.HOST_START
    for pos in range(start, end):
        new_s = _next_host_state(s, url[pos])
        if new_s is _HostState.DEAD:
            raise UrlParseError(f"invalid character {url[pos]!r} in host at {pos}")

        if new_s in (_HostState.HOST, _HostState.V6):
            if s is not new_s:
                host[0] = pos
            host[1] += 1
        elif new_s in (_HostState.V6_ZONE_START, _HostState.V6_ZONE):
            host[1] += 1
        elif new_s is _HostState.PORT:
            if s is not _HostState.PORT:
                spans[UrlField.PORT] = [pos, 0]
            spans[UrlField.PORT][1] += 1
        elif new_s is _HostState.USERINFO:
            if s is not _HostState.USERINFO:
                spans[UrlField.USERINFO] = [pos, 0]
            spans[UrlField.USERINFO][1] += 1
        s = new_s

    if s in _BAD_HOST_END_STATES:
        raise UrlParseError("host part of the URL is incomplete")


_DELIMITER_STATES = frozenset(
    {
        _State.SCHEMA_SLASH,
        _State.SCHEMA_SLASH_SLASH,
        _State.SERVER_START,
        _State.QUERY_STRING_START,
        _State.FRAGMENT_START,
    }
)

_FIELD_OF_STATE = {
    _State.SCHEMA: UrlField.SCHEMA,
    _State.SERVER_WITH_AT: UrlField.HOST,
    _State.SERVER: UrlField.HOST,
    _State.PATH: UrlField.PATH,
    _State.QUERY_STRING: UrlField.QUERY,
    _State.FRAGMENT: UrlField.FRAGMENT,
}


def parse_url(url: str, is_connect: bool = False) -> ParsedUrl:
    """Split ``url`` into its components.

    With ``is_connect`` the URL must be a bare ``host:port`` as sent with a
    CONNECT request. Raises :class:`UrlParseError` on invalid input.
    """
    spans: dict[UrlField, list[int]] = {}
    s = _State.SERVER_START if is_connect else _State.SPACES_BEFORE_URL
    previous: UrlField | None = None
    found_at = False

    for pos, ch in enumerate(url):
        s = _next_url_state(s, ch)
        if s is _State.DEAD:
            raise UrlParseError(f"invalid character {ch!r} at {pos}")
        if s in _DELIMITER_STATES:
            continue
        if s is _State.SERVER_WITH_AT:
            found_at = True
        current = _FIELD_OF_STATE[s]
        if current is previous:
            spans[current][1] += 1
            continue
        spans[current] = [pos, 1]
        previous = current

    if UrlField.SCHEMA in spans and UrlField.HOST not in spans:
        raise UrlParseError("a URL with a schema must have a host")

    if UrlField.HOST in spans:
        _split_host(url, spans, found_at)

    if is_connect and set(spans) != {UrlField.HOST, UrlField.PORT}:
        raise UrlParseError("a CONNECT target must be exactly host:port")

    port: int | None = None
    if UrlField.PORT in spans:
        offset, length = spans[UrlField.PORT]
        port = int(url[offset : offset + length])
        if port > _MAX_PORT:
            raise UrlParseError(f"port {port} is out of range")

    return ParsedUrl(
        url=url,
        fields={key: (span[0], span[1]) for key, span in spans.items()},
        port=port,
    )


def parser_version() -> int:
    """Return the version as ``major << 16 | minor << 8 | patch``."""
    return VERSION_MAJOR << 16 | VERSION_MINOR << 8 | VERSION_PATCH