from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .models import Groups, Holder, TierRange
from .project_constants import DEFAULT_NUM_GROUPS, DEFAULT_TIERS
from .randomness import PseudoRandomSource, RandomSource, shuffled


@dataclass(frozen=True)
class GroupStatistics:
    total_groups: int
    total_holders: int
    group_sizes: Dict[str, int]
    average_group_size: float


def tiers_from_mapping(config: Mapping[str, Mapping[str, Any]]) -> List[TierRange]:
    """
    Build an ordered tier list from ``{name: {"min": .., "max": ..}}``.
    Insertion order of the mapping becomes evaluation order; a missing or
    null ``max`` means unbounded.
    """
    tiers: List[TierRange] = []
    for name, bounds in config.items():
        upper = bounds.get("max")
        tiers.append(
            TierRange(
                name=name,
                min=bounds["min"],
                max=math.inf if upper is None else upper,
            )
        )
    return tiers


def classify_by_token_count(
    holders: Iterable[Holder],
    tiers: Sequence[TierRange] = DEFAULT_TIERS,
) -> Groups:
    groups: Groups = {tier.name: [] for tier in tiers}

    for holder in holders:
        for tier in tiers:
            if tier.contains(holder.token_count):
                groups[tier.name].append(holder)
                break

    return groups


def _empty_groups(num_groups: int) -> Groups:
    if num_groups < 1:
        raise ValueError(f"num_groups must be at least 1, got {num_groups}")
    return {f"group_{i + 1}": [] for i in range(num_groups)}


def classify_by_address_prefix(
    holders: Iterable[Holder], num_groups: int = DEFAULT_NUM_GROUPS
) -> Groups:
    """Alphabetical buckets: sort by address, then slice contiguously."""
    groups = _empty_groups(num_groups)

    ordered = sorted(holders, key=lambda h: h.key)
    per_group = math.ceil(len(ordered) / num_groups)
    for i, holder in enumerate(ordered):
        groups[f"group_{i // per_group + 1}"].append(holder)

    return groups


def classify_randomly(
    holders: Iterable[Holder],
    num_groups: int = DEFAULT_NUM_GROUPS,
    rng: Optional[RandomSource] = None,
) -> Groups:
    groups = _empty_groups(num_groups)

    mixed = shuffled(list(holders), rng or PseudoRandomSource())
    for i, holder in enumerate(mixed):
        groups[f"group_{i % num_groups + 1}"].append(holder)

    return groups


def group_statistics(groups: Groups) -> GroupStatistics:
    sizes = {name: len(members) for name, members in groups.items()}
    total = sum(sizes.values())
    return GroupStatistics(
        total_groups=len(sizes),
        total_holders=total,
        group_sizes=sizes,
        average_group_size=total / len(sizes) if sizes else 0.0,
    )
