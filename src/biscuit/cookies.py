"""
Cookie parsing and serialization for biscuit.

Consolidates the read side (``Cookie.parse`` for ``Cookie`` headers) and
the write side (``Cookie.serialize`` for ``Set-Cookie`` values) in one
module.
"""

import datetime
import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, unquote

from biscuit.attributes import CookieAttributes
from biscuit.exceptions import CookieError, CookieNameError, CookieOutputError, CookieValueError
from biscuit.types import Decoder, Encoder

logger = logging.getLogger("biscuit.cookies")

# HTTP token (RFC 7230 tchar)
NAME_PATTERN = re.compile(r"[0-9A-Za-z!#$%&'*+\-.^_`|~]+")
# Decoded value: HTAB, printable ASCII and Latin-1
VALUE_PATTERN = re.compile(r"[\t\x20-\x7e\x80-\xff]*")
# Wire value: RFC 6265 cookie-octet
OUTPUT_PATTERN = re.compile(r"[\x21\x23-\x2b\x2d-\x3a\x3c-\x5b\x5d-\x7e]*")

COOKIE_PATTERN = re.compile(
    r"[ \t]*"
    r"([0-9A-Za-z!#$%&'*+\-.^_`|~]+)"
    r"[ \t]*=[ \t]*"
    r"(\"(?:[\x0b\x20\x21\x23-\x5b\x5d-\x7e\x80-\xff]|\\[\x0b\x20-\xff])*\""
    r"|[0-9A-Za-z!#$%&'()*+,\-./:<=>?@\[\]^_`{|}~]+"
    r"|)"
    r"[ \t]*"
)
QUOTED_ESCAPE_PATTERN = re.compile(r"\\([\x0b\x20-\xff])")
MALFORMED_ESCAPE_PATTERN = re.compile(r"%(?![0-9A-Fa-f]{2})")

UNIX_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def encode_value(value: str) -> str:
    """Percent-encode a cookie value.

    Leaves ``A-Z a-z 0-9 - _ . ! ~ * ' ( )`` alone and escapes everything
    else as UTF-8 ``%XX``, the same set JavaScript's ``encodeURIComponent``
    keeps.
    """
    return quote(value, safe="!~*'()")


def decode_value(value: str) -> str:
    """Percent-decode a cookie value.

    Values without ``%`` are returned as is. A malformed escape or an
    escape sequence that is not valid UTF-8 returns ``value`` unchanged.
    """
    if "%" not in value:
        return value
    if MALFORMED_ESCAPE_PATTERN.search(value):
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


class Cookie:
    """
    A single HTTP cookie: name, value, attributes and a value encoder.

    Name and value are validated whenever they are assigned. Assigning
    ``attributes`` replaces the whole attribute set. ``encoder`` is only
    applied by ``serialize()``.

    Usage:
        cookie = Cookie("theme", "dark", {"path": "/", "http_only": True})
        response_header = str(cookie)   # theme=dark; Path=/; HttpOnly

        cookies = Cookie.parse(request_header)
    """

    def __init__(
        self,
        name: str,
        value: str = "",
        attributes: Mapping[str, Any] | CookieAttributes | None = None,
        encoder: Encoder = encode_value,
    ) -> None:
        self._attributes: CookieAttributes | None = None
        self.name = name
        self.value = value
        self.attributes = attributes
        self.encoder = encoder

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        if not isinstance(name, str) or not NAME_PATTERN.fullmatch(name):
            raise CookieNameError()
        self._name = name
        if self._attributes is not None:
            self._attributes = CookieAttributes(name, self._attributes)

    @property
    def value(self) -> str:
        return self._value

    @value.setter
    def value(self, value: str) -> None:
        if not isinstance(value, str) or not VALUE_PATTERN.fullmatch(value):
            raise CookieValueError(self._name)
        self._value = value

    @property
    def attributes(self) -> CookieAttributes:
        return self._attributes  # type: ignore[return-value]

    @attributes.setter
    def attributes(self, attributes: Mapping[str, Any] | CookieAttributes | None) -> None:
        self._attributes = CookieAttributes(self._name, attributes)

    @classmethod
    def parse(cls, header: str, decoder: Decoder = decode_value) -> list["Cookie"]:
        """
        Parse cookie-pairs from a ``Cookie`` header value.

        Pairs that do not match the grammar, or whose decoded value is not a
        legal cookie value, are skipped. When a name appears more than once
        the first pair wins, even if that pair was skipped. Never raises on
        header content; non-string input yields an empty list.
        """
        if not isinstance(header, str):
            return []

        seen: set[str] = set()
        cookies: dict[str, Cookie] = {}
        for match in COOKIE_PATTERN.finditer(header):
            name, value = match.group(1), match.group(2)
            if name in seen:
                continue
            seen.add(name)
            if value.startswith('"'):
                value = QUOTED_ESCAPE_PATTERN.sub(r"\1", value[1:-1])
            try:
                cookies[name] = cls(name, decoder(value))
            except (CookieError, TypeError, ValueError):
                logger.debug("Skipping cookie %r with undecodable value", name)
        return list(cookies.values())

    @classmethod
    def expired(
        cls,
        name: str,
        path: str | None = None,
        domain: str | None = None,
    ) -> "Cookie":
        """Build a cookie that tells the client to delete ``name``."""
        return cls(
            name,
            "",
            {"expires": UNIX_EPOCH, "path": path, "domain": domain, "max_age": 0},
        )

    def serialize(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        try:
            value = self.encoder(self._value)
        except (TypeError, ValueError) as exc:
            raise CookieOutputError(self._name) from exc
        if not isinstance(value, str) or not OUTPUT_PATTERN.fullmatch(value):
            raise CookieOutputError(self._name)

        parts = [f"{self._name}={value}"]
        parts.extend(self.attributes.to_header_parts())
        return "; ".join(parts)

    def __str__(self) -> str:
        return self.serialize()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cookie):
            return NotImplemented
        return (
            self._name == other._name
            and self._value == other._value
            and self._attributes == other._attributes
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, value={self._value!r})"


def parse_cookies(header: str, decoder: Decoder = decode_value) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Returns an empty dict for empty or missing headers.
    """
    return {cookie.name: cookie.value for cookie in Cookie.parse(header, decoder)}


def format_set_cookie(
    name: str,
    value: str,
    attributes: Mapping[str, Any] | CookieAttributes | None = None,
) -> str:
    """Format a ``Set-Cookie`` header value."""
    return Cookie(name, value, attributes).serialize()
