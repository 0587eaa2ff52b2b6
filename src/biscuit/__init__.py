"""
Biscuit - HTTP cookie codec and signer

Parses ``Cookie`` headers, serializes ``Set-Cookie`` values with validated
attributes, and signs cookie values with HMAC over a rotating list of
secrets.
"""

from biscuit.attributes import Attribute, CookieAttributes
from biscuit.cookies import Cookie, decode_value, encode_value, format_set_cookie, parse_cookies
from biscuit.exceptions import (
    BiscuitException,
    CookieAttributeError,
    CookieError,
    CookieNameError,
    CookieOutputError,
    CookieValueError,
    SignerAlgorithmError,
    SignerError,
    SignerSecretError,
    SignerTypeError,
    SignerValueError,
)
from biscuit.signer import CookieSigner, UnsignedCookie

__version__ = "0.1.0"
__all__ = [
    "Attribute",
    "CookieAttributes",
    "Cookie",
    "decode_value",
    "encode_value",
    "format_set_cookie",
    "parse_cookies",
    "CookieSigner",
    "UnsignedCookie",
    "BiscuitException",
    "CookieError",
    "CookieNameError",
    "CookieValueError",
    "CookieOutputError",
    "CookieAttributeError",
    "SignerError",
    "SignerSecretError",
    "SignerAlgorithmError",
    "SignerTypeError",
    "SignerValueError",
]
