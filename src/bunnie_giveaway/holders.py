from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from .models import Holder


@dataclass(frozen=True)
class HolderCensus:
    holders: List[Holder]
    total_holders: int
    total_tokens: int


def parse_holder(record: Dict[str, Any], index: int = 0) -> Holder:
    """
    Build a Holder from one census record:
    {"address": "0x..", "tokenCount": 3, "tokens": ["12", "40", "77"]}
    ``tokenCount`` may be omitted when ``tokens`` is given.
    """
    if not isinstance(record, dict):
        raise ValueError(f"Holder #{index}: expected an object, got {record!r}")

    address = record.get("address")
    if not isinstance(address, str) or not address.strip():
        raise ValueError(f"Holder #{index}: missing address")

    tokens = record.get("tokens")
    if tokens is not None and not isinstance(tokens, list):
        raise ValueError(f"Holder {address}: tokens must be a list")

    count = record.get("tokenCount")
    if count is None and tokens is not None:
        count = len(tokens)
    # bool is an int subclass; reject it explicitly
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"Holder {address}: tokenCount must be an integer, got {count!r}")
    if count < 0:
        raise ValueError(f"Holder {address}: tokenCount must be >= 0, got {count}")

    return Holder(
        address=address.strip(),
        token_count=count,
        tokens=tuple(str(t) for t in tokens) if tokens is not None else None,
    )


def _aggregate_count(data: Dict[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Holders summary: {key} must be a non-negative integer, got {value!r}")
    return value


def parse_holders_summary(data: Any) -> HolderCensus:
    if not isinstance(data, dict) or not isinstance(data.get("holders"), list):
        raise ValueError("Holders summary must be an object with a 'holders' list")

    holders = [parse_holder(rec, i) for i, rec in enumerate(data["holders"])]
    return HolderCensus(
        holders=holders,
        total_holders=_aggregate_count(data, "totalHolders", len(holders)),
        total_tokens=_aggregate_count(data, "totalTokens", sum(h.token_count for h in holders)),
    )


def load_holders_summary(path: str) -> HolderCensus:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise RuntimeError(f"Could not read holders summary {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Holders summary {path} is not valid JSON: {e}") from e
    return parse_holders_summary(data)


def filter_excluded(holders: Iterable[Holder], excluded: Set[str]) -> List[Holder]:
    denied = {addr.lower() for addr in excluded}
    return [h for h in holders if h.key not in denied]


def load_excluded_wallets(path: Optional[str]) -> Set[str]:
    if not path:
        return set()
    out: Set[str] = set()
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            w = line.strip()
            if not w or w.startswith("#"):
                continue
            out.add(w.lower())
    return out
