"""
Shared helpers and fixtures for biscuit tests.
"""

import base64
import datetime
import hashlib
import hmac

import pytest

from biscuit import CookieSigner


def make_signature(value: str, secret: str | bytes, algorithm: str = "sha256") -> str:
    """Compute a cookie signature independently of CookieSigner."""
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    digest = hmac.new(secret, value.encode("utf-8"), getattr(hashlib, algorithm)).digest()
    return base64.b64encode(digest).decode("ascii").replace("=", "")


@pytest.fixture
def expires() -> datetime.datetime:
    return datetime.datetime(2000, 12, 24, 10, 30, 59, 900000, tzinfo=datetime.timezone.utc)


@pytest.fixture
def signer() -> CookieSigner:
    return CookieSigner("secret-key-for-tests")


@pytest.fixture
def rotating_signer() -> CookieSigner:
    return CookieSigner(["current-secret-for-tests", "previous-secret-for-tests"])
