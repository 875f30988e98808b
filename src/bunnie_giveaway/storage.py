from __future__ import annotations

import csv
import io
import json
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .contest import ContestResult
from .holders import parse_holder
from .models import Groups, Holder
from .project_constants import GUARANTEED_TIER

HOLDER_CSV_HEADER = ["Address", "TokenCount", "Tokens"]
WINNING_WALLETS_HEADER = ["Address", "TokenCount", "Tokens", "Category", "RewardType"]
CONTEST_LOG_HEADER = [
    "Timestamp",
    "Category",
    "Tier",
    "RequestedWinners",
    "AwardedWinners",
    "Address",
    "TokenCount",
    "Tokens",
    "RewardType",
    "TotalTickets",
    "TotalEntries",
    "EligibleHolders",
    "TotalTokens",
]

TIER_WINNER = "Tier Winner"
GUARANTEED_REWARD = "Guaranteed Reward"
EXCLUSIVE_REWARD = "1/1 Exclusive NFT"
EXCLUSIVE_CATEGORY = "Exclusive"


@dataclass(frozen=True)
class WinningWallet:
    address: str
    token_count: int
    tokens: Optional[Tuple[str, ...]]
    category: str
    reward_type: str


def holder_to_dict(holder: Holder) -> Dict[str, Any]:
    return {
        "address": holder.address,
        "tokenCount": holder.token_count,
        "tokens": list(holder.tokens) if holder.tokens is not None else None,
    }


def _join_tokens(tokens: Optional[Sequence[str]]) -> str:
    return ";".join(tokens) if tokens else ""


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def save_json(data: Any, path: str) -> str:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


def groups_to_dict(groups: Groups) -> Dict[str, List[Dict[str, Any]]]:
    return {name: [holder_to_dict(h) for h in members] for name, members in groups.items()}


def save_groups(groups: Groups, path: str) -> str:
    return save_json(groups_to_dict(groups), path)


def load_groups(path: str) -> Groups:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise RuntimeError(f"Could not read groups file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Groups file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise RuntimeError(f"Groups file {path} must contain an object of groups")

    groups: Groups = {}
    for name, members in data.items():
        if not isinstance(members, list):
            raise ValueError(f"Group {name!r} in {path} must be a list of holders")
        groups[name] = [parse_holder(rec, i) for i, rec in enumerate(members)]
    return groups


def _write_csv(path: str, header: List[str], rows: List[List[Any]]) -> str:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def holders_to_csv(holders: Sequence[Holder]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HOLDER_CSV_HEADER)
    for h in holders:
        writer.writerow([h.address, h.token_count, _join_tokens(h.tokens)])
    return buf.getvalue()


def safe_group_filename(group_name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", group_name) + ".csv"


def save_groups_to_csv(groups: Groups, out_dir: str) -> List[Tuple[str, str]]:
    """Write one CSV per group; returns (group name, file path) pairs."""
    os.makedirs(out_dir, exist_ok=True)
    saved: List[Tuple[str, str]] = []
    for name, members in groups.items():
        path = os.path.join(out_dir, safe_group_filename(name))
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(holders_to_csv(members))
        saved.append((name, path))
    return saved


def contest_payload(
    result: ContestResult,
    eligible: Sequence[Holder],
    rules: Dict[str, Any],
    selection_seed: Optional[int] = None,
) -> Dict[str, Any]:
    exclusive = result.exclusive_raffle
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "rules": rules,
        # replays the tier draws; the exclusive raffle is never seeded
        "selectionSeed": selection_seed,
        "totals": {
            "eligibleHolders": len(eligible),
            "totalTokens": sum(h.token_count for h in eligible),
        },
        "tierResults": {
            tier: {
                "requestedWinners": info.requested_winners,
                "winners": [holder_to_dict(h) for h in info.winners],
            }
            for tier, info in result.tier_results.items()
        },
        "whaleRewards": [holder_to_dict(h) for h in result.guaranteed],
        "exclusiveRaffle": {
            "totalTickets": exclusive.total_tickets,
            "entries": exclusive.entrants,
            "winningTicket": exclusive.winning_ticket,
            "winner": holder_to_dict(exclusive.winner) if exclusive.winner else None,
        },
    }


def winning_wallets(result: ContestResult) -> List[WinningWallet]:
    rows: List[WinningWallet] = []
    for tier, info in result.tier_results.items():
        for h in info.winners:
            rows.append(WinningWallet(h.address, h.token_count, h.tokens, tier, TIER_WINNER))

    for h in result.guaranteed:
        rows.append(
            WinningWallet(h.address, h.token_count, h.tokens, GUARANTEED_TIER, GUARANTEED_REWARD)
        )

    winner = result.exclusive_raffle.winner
    if winner is not None:
        rows.append(
            WinningWallet(
                winner.address,
                winner.token_count,
                winner.tokens,
                EXCLUSIVE_CATEGORY,
                EXCLUSIVE_REWARD,
            )
        )
    return rows


def save_winning_wallets_csv(result: ContestResult, path: str) -> str:
    rows = [
        [w.address, w.token_count, _join_tokens(w.tokens), w.category, w.reward_type]
        for w in winning_wallets(result)
    ]
    return _write_csv(path, WINNING_WALLETS_HEADER, rows)


def contest_log_rows(payload: Dict[str, Any]) -> List[List[Any]]:
    """Flatten a saved contest payload into one log row per awarded wallet."""
    timestamp = payload.get("timestamp", "")
    totals = payload.get("totals", {})
    eligible = totals.get("eligibleHolders", 0)
    total_tokens = totals.get("totalTokens", 0)
    tail = [eligible, total_tokens]

    rows: List[List[Any]] = []
    for tier, info in payload.get("tierResults", {}).items():
        requested = info.get("requestedWinners", 0)
        winners = info.get("winners") or []
        head = [timestamp, "Tier Result", tier, requested, len(winners)]
        if not winners:
            rows.append(head + ["", "", "", TIER_WINNER, "", ""] + tail)
        for w in winners:
            rows.append(
                head
                + [w["address"], w["tokenCount"], _join_tokens(w.get("tokens")), TIER_WINNER, "", ""]
                + tail
            )

    for w in payload.get("whaleRewards", []):
        rows.append(
            [timestamp, "Whale Reward", GUARANTEED_TIER, "All", 1]
            + [w["address"], w["tokenCount"], _join_tokens(w.get("tokens")), GUARANTEED_REWARD, "", ""]
            + tail
        )

    exclusive = payload.get("exclusiveRaffle") or {}
    total_tickets = exclusive.get("totalTickets", 0)
    entries = exclusive.get("entries", 0)
    winner = exclusive.get("winner")
    if exclusive:
        if winner:
            who = [winner["address"], winner["tokenCount"], _join_tokens(winner.get("tokens"))]
        else:
            who = ["", "", ""]
        rows.append(
            [timestamp, "Exclusive Raffle", EXCLUSIVE_CATEGORY, 1, 1 if winner else 0]
            + who
            + [EXCLUSIVE_REWARD, total_tickets, entries]
            + tail
        )

    rows.append(
        [timestamp, "Summary", "All Tiers", "", "", "", "", "", "Total Winners"]
        + [total_tickets or "", entries or ""]
        + tail
    )
    return rows


def save_contest_log_csv(payload: Dict[str, Any], path: str) -> str:
    return _write_csv(path, CONTEST_LOG_HEADER, contest_log_rows(payload))
