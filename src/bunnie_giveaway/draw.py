from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .models import Holder
from .project_constants import WHALE_TICKET_MULTIPLIER, WHALE_TICKET_THRESHOLD
from .randomness import RandomSource, SecureRandomSource


@dataclass(frozen=True)
class HolderRange:
    holder: Holder
    tickets: int
    start_ticket: int
    end_ticket: int  # exclusive


@dataclass(frozen=True)
class RaffleResult:
    winner: Optional[Holder]
    total_tickets: int
    entrants: int
    winning_ticket: Optional[int] = None


def ticket_count(holder: Holder) -> int:
    base = holder.token_count
    if base <= 0:
        return 0
    if base >= WHALE_TICKET_THRESHOLD:
        return base * WHALE_TICKET_MULTIPLIER
    return base


def build_ranges(holders: Iterable[Holder]) -> Tuple[List[HolderRange], int]:
    ranges: List[HolderRange] = []
    cursor = 0
    for holder in holders:
        tickets = ticket_count(holder)
        if tickets <= 0:
            continue
        start = cursor
        end = cursor + tickets
        ranges.append(HolderRange(holder, tickets, start, end))
        cursor = end
    return ranges, cursor


def find_winner(ranges: List[HolderRange], ticket: int) -> HolderRange:
    ends = [r.end_ticket for r in ranges]
    idx = bisect_right(ends, ticket)
    if ticket < 0 or idx >= len(ranges):
        raise RuntimeError(f"Ticket {ticket} out of range (unexpected).")
    return ranges[idx]


def draw_weighted_winner(
    holders: Iterable[Holder],
    rng: Optional[RandomSource] = None,
) -> RaffleResult:
    """
    Pick one holder with probability ``ticket_count / total_tickets``.

    Holders without tickets are not entrants. An empty pool is a normal
    outcome and yields a result with ``winner=None``.
    """
    ranges, total_tickets = build_ranges(holders)
    if not ranges or total_tickets <= 0:
        return RaffleResult(winner=None, total_tickets=0, entrants=0)

    ticket = (rng or SecureRandomSource()).randbelow(total_tickets)
    winner = find_winner(ranges, ticket)
    return RaffleResult(
        winner=winner.holder,
        total_tickets=total_tickets,
        entrants=len(ranges),
        winning_ticket=ticket,
    )
