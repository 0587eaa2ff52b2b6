"""
Type definitions for biscuit.
"""

from collections.abc import Callable, Sequence
from typing import TypeAlias

# Value transforms
Encoder: TypeAlias = Callable[[str], str]
Decoder: TypeAlias = Callable[[str], str]

# Signer Types
Secret: TypeAlias = str | bytes
Secrets: TypeAlias = Secret | Sequence[Secret]
