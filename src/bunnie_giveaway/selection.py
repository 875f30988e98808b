from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .models import Groups, Holder
from .randomness import PseudoRandomSource, RandomSource, shuffled


@dataclass(frozen=True)
class WinnerStatistics:
    total_groups: int
    total_winners: int
    winners_per_group: Dict[str, int]
    unique_winner_count: int


def select_without_replacement(
    holders: Sequence[Holder],
    n: int,
    rng: Optional[RandomSource] = None,
) -> List[Holder]:
    """
    Draw ``n`` distinct holders uniformly at random. Asking for at least
    as many holders as there are returns all of them.
    """
    if n >= len(holders):
        return list(holders)
    if n <= 0:
        return []
    return shuffled(holders, rng or PseudoRandomSource())[:n]


def select_winners_from_groups(
    groups: Groups,
    winners_per_group: int = 1,
    rng: Optional[RandomSource] = None,
) -> Groups:
    rng = rng or PseudoRandomSource()
    return {
        name: select_without_replacement(members, winners_per_group, rng)
        for name, members in groups.items()
    }


def select_winners_proportionally(
    groups: Groups,
    total_winners: int,
    rng: Optional[RandomSource] = None,
) -> Groups:
    """
    Spread ``total_winners`` across groups by group size (floored), then
    hand out the remainder one winner at a time to random groups that
    still have someone left to pick.
    """
    rng = rng or PseudoRandomSource()
    total_holders = sum(len(members) for members in groups.values())
    if total_holders == 0:
        return {name: [] for name in groups}

    winners: Groups = {}
    remaining = total_winners
    for name, members in groups.items():
        quota = total_winners * len(members) // total_holders
        winners[name] = select_without_replacement(members, quota, rng)
        remaining -= quota

    while remaining > 0:
        open_groups = []
        for name, members in groups.items():
            taken = {w.key for w in winners[name]}
            available = [h for h in members if h.key not in taken]
            if available:
                open_groups.append((name, available))
        if not open_groups:
            break

        name, available = open_groups[rng.randbelow(len(open_groups))]
        winners[name].extend(select_without_replacement(available, 1, rng))
        remaining -= 1

    return winners


def winner_statistics(winners: Groups) -> WinnerStatistics:
    per_group = {name: len(members) for name, members in winners.items()}
    unique = {w.key for members in winners.values() for w in members}
    return WinnerStatistics(
        total_groups=len(per_group),
        total_winners=sum(per_group.values()),
        winners_per_group=per_group,
        unique_winner_count=len(unique),
    )
