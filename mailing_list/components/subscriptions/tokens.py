"""
Subscription token generation.

Tokens are fixed-length strings drawn uniformly from [A-Za-z0-9] using an
injected randomness source. Production uses ``secrets.SystemRandom``;
tests may pass a seeded ``random.Random``.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Sequence
from typing import Protocol, TypeVar

TOKEN_ALPHABET = string.ascii_letters + string.digits
TOKEN_LENGTH = 25

T = TypeVar("T")


class RandomSource(Protocol):
    def choice(self, seq: Sequence[T]) -> T: ...


class TokenGenerator:
    def __init__(self, rng: RandomSource | None = None, length: int = TOKEN_LENGTH) -> None:
        if length <= 0:
            raise ValueError("Token length must be positive")
        self._rng = rng if rng is not None else secrets.SystemRandom()
        self.length = length

    def generate(self) -> str:
        return "".join(self._rng.choice(TOKEN_ALPHABET) for _ in range(self.length))
