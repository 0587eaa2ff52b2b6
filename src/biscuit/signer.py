"""
Cookie signing for biscuit.
Appends an HMAC of the cookie value and verifies it against a list of
secrets so signing keys can be rotated without invalidating cookies.
"""

import base64
import hmac
import logging
import threading
from collections.abc import Mapping
from secrets import token_bytes, token_urlsafe
from typing import Any

from biscuit.attributes import CookieAttributes
from biscuit.cookies import Cookie, encode_value
from biscuit.exceptions import (
    SignerAlgorithmError,
    SignerSecretError,
    SignerTypeError,
    SignerValueError,
)
from biscuit.types import Encoder, Secret, Secrets

logger = logging.getLogger("biscuit.signer")

DEFAULT_ALGORITHM = "sha256"

# Minimum recommended secret length (in characters or bytes)
_MIN_SECRET_LENGTH: int = 16


def _warn_if_short(keys: tuple[bytes, ...]) -> None:
    if any(len(key) < _MIN_SECRET_LENGTH for key in keys):
        logger.warning(
            "Cookie signer configured with a secret shorter than %d characters",
            _MIN_SECRET_LENGTH,
        )


class UnsignedCookie(Cookie):
    """
    Result of ``CookieSigner.unsign``.

    ``valid`` is True when the signature matched one of the secrets.
    ``renew`` is True when it matched a secret other than the current
    signing secret, meaning the cookie should be signed again.
    """

    def __init__(
        self,
        name: str,
        value: str = "",
        attributes: Mapping[str, Any] | CookieAttributes | None = None,
        encoder: Encoder = encode_value,
        *,
        valid: bool = False,
        renew: bool = False,
    ) -> None:
        super().__init__(name, value, attributes, encoder)
        self.valid = valid
        self.renew = renew

    def __repr__(self) -> str:
        return (
            f"UnsignedCookie(name={self.name!r}, value={self.value!r}, "
            f"valid={self.valid}, renew={self.renew})"
        )


class CookieSigner:
    """
    HMAC cookie signer with secret rotation.

    The first secret signs; every secret is tried, in order, when
    verifying. A signed value has the form ``<value>.<mac>`` where ``mac``
    is the base64 HMAC digest of the value with ``=`` padding removed.

    ``secrets`` and ``algorithm`` may be replaced on a live instance. The
    swap happens under a lock and every ``sign``/``unsign`` call works on
    one consistent snapshot of both.
    """

    def __init__(self, secrets: Secrets, algorithm: str = DEFAULT_ALGORITHM) -> None:
        self._lock = threading.Lock()
        if isinstance(secrets, (str, bytes)):
            secrets = [secrets]
        self.secrets = secrets  # type: ignore[assignment]
        self.algorithm = algorithm

    @property
    def secrets(self) -> list[Secret]:
        return list(self._secrets)

    @secrets.setter
    def secrets(self, secrets: list[Secret] | tuple[Secret, ...]) -> None:
        if not isinstance(secrets, (list, tuple)) or not secrets:
            raise SignerSecretError()
        for secret in secrets:
            if not isinstance(secret, (str, bytes)):
                raise SignerSecretError()

        keys = tuple(self._to_key(secret) for secret in secrets)
        _warn_if_short(keys)
        with self._lock:
            self._secrets = tuple(secrets)
            self._keys = keys

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @algorithm.setter
    def algorithm(self, algorithm: str) -> None:
        if not isinstance(algorithm, str):
            raise SignerAlgorithmError(algorithm)
        try:
            hmac.new(token_bytes(16), digestmod=algorithm).digest()
        except (TypeError, ValueError) as exc:
            raise SignerAlgorithmError(algorithm) from exc
        with self._lock:
            self._algorithm = algorithm

    def rotate(self, secret: Secret, max_secrets: int | None = None) -> None:
        """
        Make ``secret`` the signing secret; older secrets still verify.

        With ``max_secrets`` set, only the newest ``max_secrets`` secrets
        are kept and the oldest ones stop verifying. Without it the list
        grows by one on every call.
        """
        if not isinstance(secret, (str, bytes)):
            raise SignerSecretError()
        if max_secrets is not None and (
            isinstance(max_secrets, bool) or not isinstance(max_secrets, int) or max_secrets < 1
        ):
            raise ValueError("max_secrets must be a positive integer")
        key = self._to_key(secret)
        _warn_if_short((key,))
        with self._lock:
            self._secrets = (secret, *self._secrets)[:max_secrets]
            self._keys = (key, *self._keys)[:max_secrets]
            total = len(self._keys)
        logger.info("Cookie signer rotated to a new signing secret (%d total)", total)

    def sign(self, cookie: Cookie) -> Cookie:
        """Return a new cookie whose value carries an HMAC signature."""
        if not isinstance(cookie, Cookie):
            raise SignerTypeError()
        if not cookie.value:
            raise SignerValueError(cookie.name)

        keys, algorithm = self._snapshot()
        signature = self._create_signature(cookie.value, keys[0], algorithm)
        return Cookie(
            cookie.name,
            f"{cookie.value}.{signature}",
            cookie.attributes,
            cookie.encoder,
        )

    def unsign(self, cookie: Cookie) -> UnsignedCookie:
        """
        Verify a signed cookie and strip its signature.

        Returns an ``UnsignedCookie`` holding the original value when a
        secret matches, or an empty value with ``valid=False`` otherwise.
        Verification failure is never raised.
        """
        if not isinstance(cookie, Cookie):
            raise SignerTypeError()

        payload, separator, signature = cookie.value.rpartition(".")
        if not separator:
            payload, signature = cookie.value, ""
        actual = signature.encode("utf-8")

        keys, algorithm = self._snapshot()
        for index, key in enumerate(keys):
            expected = self._create_signature(payload, key, algorithm).encode("ascii")
            # Verify signature using constant-time comparison
            if len(expected) == len(actual) and hmac.compare_digest(expected, actual):
                renew = index != 0
                if renew:
                    logger.info(
                        "Cookie %r verified with rotated secret #%d", cookie.name, index
                    )
                return UnsignedCookie(
                    cookie.name,
                    payload,
                    cookie.attributes,
                    cookie.encoder,
                    valid=True,
                    renew=renew,
                )

        logger.debug("Cookie %r failed signature verification", cookie.name)
        return UnsignedCookie(
            cookie.name,
            "",
            cookie.attributes,
            cookie.encoder,
            valid=False,
            renew=False,
        )

    def _snapshot(self) -> tuple[tuple[bytes, ...], str]:
        with self._lock:
            return self._keys, self._algorithm

    @staticmethod
    def _to_key(secret: Secret) -> bytes:
        if isinstance(secret, str):
            return secret.encode("utf-8")
        return secret

    @staticmethod
    def _create_signature(value: str, key: bytes, algorithm: str) -> str:
        """Create the HMAC signature for a value."""
        signature = hmac.new(key, value.encode("utf-8"), algorithm).digest()
        return base64.b64encode(signature).decode("ascii").rstrip("=")

    @staticmethod
    def generate_secret(length: int = 32) -> str:
        """Generate a cryptographically secure secret."""
        return token_urlsafe(length)
