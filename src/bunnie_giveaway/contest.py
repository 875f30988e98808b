from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from .draw import RaffleResult, draw_weighted_winner
from .models import Groups, Holder
from .project_constants import DEFAULT_TIER_REWARDS, GUARANTEED_TIER
from .randomness import PseudoRandomSource, RandomSource
from .selection import select_without_replacement

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierResult:
    requested_winners: int
    winners: List[Holder]


@dataclass(frozen=True)
class ContestResult:
    tier_results: Dict[str, TierResult]
    guaranteed: List[Holder]
    exclusive_raffle: RaffleResult


def flatten_groups(groups: Groups) -> List[Holder]:
    return [holder for members in groups.values() for holder in members]


def run_contest(
    groups: Groups,
    tier_rewards: Optional[Mapping[str, int]] = None,
    *,
    rng: Optional[RandomSource] = None,
    raffle_rng: Optional[RandomSource] = None,
) -> ContestResult:
    """
    Run the holder contest over already classified tier groups.

    ``tier_rewards`` overrides entries of ``DEFAULT_TIER_REWARDS``. Tier
    winners are drawn with ``rng``; the exclusive raffle uses ``raffle_rng``,
    which defaults to the secure source. A holder can win in both.
    """
    rewards = dict(DEFAULT_TIER_REWARDS)
    rewards.update(tier_rewards or {})

    if GUARANTEED_TIER in rewards:
        raise ValueError(
            f"{GUARANTEED_TIER} members are all rewarded; it takes no winner count"
        )
    for tier, count in rewards.items():
        if count < 0:
            raise ValueError(f"Reward count for {tier!r} must be >= 0, got {count}")

    rng = rng or PseudoRandomSource()

    tier_results: Dict[str, TierResult] = {}
    for tier, count in rewards.items():
        members = groups.get(tier, [])
        winners = select_without_replacement(members, count, rng)
        log.debug("%s: %d/%d winners from %d holders", tier, len(winners), count, len(members))
        tier_results[tier] = TierResult(requested_winners=count, winners=winners)

    guaranteed = list(groups.get(GUARANTEED_TIER, []))

    exclusive = draw_weighted_winner(flatten_groups(groups), raffle_rng)
    log.debug(
        "Exclusive raffle: %d tickets across %d entrants",
        exclusive.total_tickets,
        exclusive.entrants,
    )

    return ContestResult(
        tier_results=tier_results,
        guaranteed=guaranteed,
        exclusive_raffle=exclusive,
    )
