"""
Cookie attributes for biscuit.

``CookieAttributes`` stores the optional ``Set-Cookie`` attributes of one
cookie. Every key has exactly one validator, applied when the value is
written; reads return whatever was stored.
"""

import datetime
import email.utils
import math
import re
from collections.abc import Callable, Iterator, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from biscuit.exceptions import CookieAttributeError

# Printable ASCII without "," and ";" (Path and Domain are written verbatim)
ATTRIBUTE_VALUE_PATTERN = re.compile(r"[\x20-\x2b\x2d-\x3a\x3c-\x7e]*")

SAME_SITE_VALUES = frozenset({"Strict", "Lax", "None"})
PRIORITY_VALUES = frozenset({"Low", "Medium", "High"})


class Attribute(str, Enum):
    """Closed set of cookie attribute keys, in serialization order."""

    EXPIRES = "expires"
    PATH = "path"
    DOMAIN = "domain"
    MAX_AGE = "max_age"
    SECURE = "secure"
    HTTP_ONLY = "http_only"
    SAME_SITE = "same_site"
    PRIORITY = "priority"

    @property
    def wire_name(self) -> str:
        """Attribute name as written in a ``Set-Cookie`` header."""
        return _WIRE_NAMES[self]

    @property
    def is_flag(self) -> bool:
        return self in (Attribute.SECURE, Attribute.HTTP_ONLY)


_WIRE_NAMES: dict[Attribute, str] = {
    Attribute.EXPIRES: "Expires",
    Attribute.PATH: "Path",
    Attribute.DOMAIN: "Domain",
    Attribute.MAX_AGE: "Max-Age",
    Attribute.SECURE: "Secure",
    Attribute.HTTP_ONLY: "HttpOnly",
    Attribute.SAME_SITE: "SameSite",
    Attribute.PRIORITY: "Priority",
}


def capitalize(value: str) -> str:
    """Lowercase ``value`` and uppercase its first character."""
    lower = value.lower()
    return lower[:1].upper() + lower[1:]


def format_http_date(value: datetime.datetime) -> str:
    """Format a datetime as an IMF-fixdate (``Sun, 24 Dec 2000 10:30:59 GMT``).

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    else:
        value = value.astimezone(datetime.timezone.utc)
    return email.utils.format_datetime(value, usegmt=True)


# ----------------------------------------------------------------------
# Validators: return the value to store, None to store nothing,
# raise TypeError/ValueError to reject.
# ----------------------------------------------------------------------


def _validate_expires(value: Any) -> datetime.datetime:
    if not isinstance(value, datetime.datetime):
        raise TypeError("expires must be a datetime")
    return value


def _validate_text(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError("expected a string")
    if not ATTRIBUTE_VALUE_PATTERN.fullmatch(value):
        raise ValueError("illegal characters")
    return value


def _validate_max_age(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("max_age must be numeric")
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal, str)):
        number = float(value)
        if not math.isfinite(number):
            raise ValueError("max_age must be finite")
        return math.floor(number)
    raise TypeError("max_age must be numeric")


def _validate_flag(value: Any) -> bool | None:
    if not isinstance(value, bool):
        raise TypeError("expected a bool")
    return True if value else None


def _enum_validator(allowed: frozenset[str]) -> Callable[[Any], str]:
    def validate(value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError("expected a string")
        normalized = capitalize(value)
        if normalized not in allowed:
            raise ValueError(f"expected one of {sorted(allowed)}")
        return normalized

    return validate


_VALIDATORS: dict[Attribute, Callable[[Any], Any]] = {
    Attribute.EXPIRES: _validate_expires,
    Attribute.PATH: _validate_text,
    Attribute.DOMAIN: _validate_text,
    Attribute.MAX_AGE: _validate_max_age,
    Attribute.SECURE: _validate_flag,
    Attribute.HTTP_ONLY: _validate_flag,
    Attribute.SAME_SITE: _enum_validator(SAME_SITE_VALUES),
    Attribute.PRIORITY: _enum_validator(PRIORITY_VALUES),
}


def _attribute_property(key: Attribute) -> property:
    def fget(self: "CookieAttributes") -> Any:
        return self.get(key)

    def fset(self: "CookieAttributes", value: Any) -> None:
        self.set(key, value)

    def fdel(self: "CookieAttributes") -> None:
        self._values.pop(key, None)

    return property(fget, fset, fdel, doc=f"The ``{key.wire_name}`` attribute.")


class CookieAttributes:
    """
    Validated ``Set-Cookie`` attributes of a single cookie.

    ``owner`` is the name of the cookie these attributes belong to; it only
    appears in error messages. ``values`` may be a mapping keyed by
    attribute name or another ``CookieAttributes``. ``None`` entries are
    skipped.

    Boolean flags are never stored as ``False``: assigning ``False`` removes
    the flag, as does assigning ``None`` to any attribute.
    """

    __slots__ = ("_owner", "_values")

    def __init__(
        self,
        owner: str,
        values: "Mapping[str, Any] | CookieAttributes | None" = None,
    ) -> None:
        self._owner = owner
        self._values: dict[Attribute, Any] = {}

        if values is None:
            return
        if isinstance(values, CookieAttributes):
            self._values = dict(values._values)
            return

        keys: dict[Attribute, Any] = {}
        for raw_key, value in values.items():
            try:
                key = Attribute(raw_key)
            except ValueError:
                raise CookieAttributeError(owner, str(raw_key)) from None
            keys[key] = value
        for key in Attribute:
            if keys.get(key) is not None:
                self.set(key, keys[key])

    expires = _attribute_property(Attribute.EXPIRES)
    path = _attribute_property(Attribute.PATH)
    domain = _attribute_property(Attribute.DOMAIN)
    max_age = _attribute_property(Attribute.MAX_AGE)
    secure = _attribute_property(Attribute.SECURE)
    http_only = _attribute_property(Attribute.HTTP_ONLY)
    same_site = _attribute_property(Attribute.SAME_SITE)
    priority = _attribute_property(Attribute.PRIORITY)

    @property
    def owner(self) -> str:
        return self._owner

    def get(self, key: Attribute | str) -> Any:
        return self._values.get(Attribute(key))

    def set(self, key: Attribute | str, value: Any) -> None:
        """Validate and store one attribute."""
        key = Attribute(key)
        if value is None:
            self._values.pop(key, None)
            return
        try:
            stored = _VALIDATORS[key](value)
        except (TypeError, ValueError):
            raise CookieAttributeError(self._owner, key.value) from None
        if stored is None:
            self._values.pop(key, None)
        else:
            self._values[key] = stored

    def items(self) -> Iterator[tuple[Attribute, Any]]:
        """Yield stored ``(key, value)`` pairs in serialization order."""
        for key in Attribute:
            if key in self._values:
                yield key, self._values[key]

    def as_dict(self) -> dict[str, Any]:
        return {key.value: value for key, value in self.items()}

    def to_header_parts(self) -> list[str]:
        """Render the stored attributes as ``Set-Cookie`` directives."""
        parts: list[str] = []
        for key, value in self.items():
            if key.is_flag:
                parts.append(key.wire_name)
            elif key is Attribute.EXPIRES:
                parts.append(f"{key.wire_name}={format_http_date(value)}")
            else:
                parts.append(f"{key.wire_name}={value}")
        return parts

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CookieAttributes):
            return NotImplemented
        return self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CookieAttributes({self._owner!r}, {self.as_dict()!r})"
