from __future__ import annotations

import random
import secrets
from typing import List, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def randbelow(self, n: int) -> int:
        """Uniform integer in [0, n)."""
        ...


class PseudoRandomSource:
    """
    General-purpose PRNG. Used for tier quotas and bucketing, where a
    seed makes runs reproducible.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._random = random.Random(seed)

    def randbelow(self, n: int) -> int:
        return self._random.randrange(n)


class SecureRandomSource:
    """OS-backed CSPRNG. Used for the exclusive raffle draw."""

    def randbelow(self, n: int) -> int:
        return secrets.randbelow(n)


def shuffled(items: Sequence[T], rng: RandomSource) -> List[T]:
    """Fisher-Yates shuffle of a copy of ``items``."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randbelow(i + 1)
        out[i], out[j] = out[j], out[i]
    return out
