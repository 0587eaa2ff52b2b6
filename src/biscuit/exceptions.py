"""
Biscuit exceptions.
Each exception names one kind of validation failure.
"""


class BiscuitException(Exception):
    """Base exception for all biscuit errors."""

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class CookieError(BiscuitException):
    """Cookie-related errors."""
    pass


class CookieNameError(CookieError):
    """Cookie name is missing, not a string, or not an HTTP token."""

    def __init__(self) -> None:
        super().__init__(
            "Cookie name is not type of string or contain illegal characters."
        )


class CookieValueError(CookieError):
    """Cookie value is not a string or contains illegal characters."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f'Cookie "{name}" value is not string or contain illegal characters.'
        )


class CookieOutputError(CookieError):
    """The encoder produced a value that cannot be sent on the wire."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f'Cookie "{name}" encoded value is not string or contain illegal characters.'
        )


class CookieAttributeError(CookieError):
    """A cookie attribute failed its validator."""

    def __init__(self, name: str, key: str) -> None:
        self.name = name
        self.key = key
        super().__init__(f'Cookie "{name}" {key} option is invalid.')


class SignerError(BiscuitException):
    """Signer-related errors."""
    pass


class SignerSecretError(SignerError):
    """Secrets are not a non-empty list of strings or bytes."""

    def __init__(self) -> None:
        super().__init__("Signer secret must be a list containing strings or bytes.")


class SignerAlgorithmError(SignerError):
    """The MAC algorithm is unknown to hashlib or unusable with HMAC."""

    def __init__(self, algorithm: object) -> None:
        self.algorithm = algorithm
        super().__init__(f'Signer algorithm "{algorithm}" not supported.')


class SignerTypeError(SignerError, TypeError):
    """sign() or unsign() received something other than a Cookie."""

    def __init__(self) -> None:
        super().__init__("Signer cookie should be instance of Cookie.")


class SignerValueError(SignerError, ValueError):
    """sign() received a cookie with an empty value."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Signer cookie "{name}" is undefined or empty string.')
