"""
Short-code generation strategies for tidylink.

Provided strategies:
- RandomStrategy: L characters drawn uniformly from the 62-character
  alphanumeric alphabet (default L = 6).

Notes:
- Random codes rely on storage-level uniqueness: the backend rejects a taken
  code and LinkStore retries with a fresh draw.
- At length 6 there are 62**6 (about 5.7e10) codes; by the birthday bound a
  collision becomes likely after roughly 280k live links, so the retry path
  is exercised in production, not just in theory.
- Strategies are injectable (LinkStore(strategy=...)) so tests can force
  collisions deterministically.
"""

from __future__ import annotations

import random
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
DEFAULT_CODE_LENGTH = 6


class BaseStrategy(ABC):
    """Abstract base for code generation strategies."""

    @abstractmethod
    def generate(self, length: int = DEFAULT_CODE_LENGTH) -> str:  # pragma: no cover
        """Return a new candidate code of `length` characters."""
        raise NotImplementedError


@dataclass(frozen=True)
class RandomStrategy(BaseStrategy):
    """Uniform random Base62 codes from the OS CSPRNG."""
    _rng: random.SystemRandom = field(default_factory=random.SystemRandom, repr=False, compare=False)

    def generate(self, length: int = DEFAULT_CODE_LENGTH) -> str:
        if length < 1:
            raise ValueError("length must be positive")
        return "".join(self._rng.choice(ALPHABET) for _ in range(length))


def generate_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Convenience wrapper around a fresh RandomStrategy."""
    return RandomStrategy().generate(length)
