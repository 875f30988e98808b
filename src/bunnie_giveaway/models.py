from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Holder:
    address: str
    token_count: int
    tokens: Optional[Tuple[str, ...]] = None

    @property
    def key(self) -> str:
        """Case-insensitive identity of the wallet."""
        return self.address.lower()


@dataclass(frozen=True)
class TierRange:
    """
    Token-count range of a tier. Both bounds are inclusive; ``max`` may be
    ``math.inf`` for an open-ended top tier.
    """

    name: str
    min: float
    max: float = math.inf

    def contains(self, token_count: int) -> bool:
        return self.min <= token_count <= self.max


# tier / group name -> holders, in classification order
Groups = Dict[str, List[Holder]]
