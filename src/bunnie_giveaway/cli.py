from __future__ import annotations

import argparse
import logging
import os
from typing import Dict, List

import httpx

from .census_client import CensusClient
from .classify import (
    classify_by_address_prefix,
    classify_by_token_count,
    classify_randomly,
    group_statistics,
)
from .config import Settings
from .contest import run_contest
from .holders import (
    HolderCensus,
    filter_excluded,
    load_excluded_wallets,
    load_holders_summary,
)
from .models import Holder
from .project_constants import (
    CONTEST_LOGS_FILE,
    CONTEST_RESULTS_FILE,
    CONTEST_RULES,
    DEFAULT_NUM_GROUPS,
    DEFAULT_TIER_REWARDS,
    GROUPS_FILE,
    TIER_GROUPS_FILE,
    WINNERS_FILE,
    WINNING_WALLETS_FILE,
)
from .randomness import PseudoRandomSource, SecureRandomSource
from .selection import (
    select_winners_from_groups,
    select_winners_proportionally,
    winner_statistics,
)
from .storage import (
    contest_payload,
    groups_to_dict,
    load_groups,
    save_contest_log_csv,
    save_groups,
    save_groups_to_csv,
    save_json,
    save_winning_wallets_csv,
)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def settings_from_args(args: argparse.Namespace) -> Settings:
    try:
        return Settings.from_env(
            data_dir=args.data_dir,
            holders_file=args.holders,
            holders_url=args.holders_url,
            excluded_wallets_file=args.excluded,
            seed=args.seed,
        )
    except RuntimeError as e:
        raise SystemExit(str(e))


def load_census(settings: Settings, timeout_s: float) -> HolderCensus:
    try:
        if settings.holders_url:
            client = CensusClient(settings.holders_url, timeout_s=timeout_s)
            try:
                return client.fetch_summary()
            finally:
                client.close()
        return load_holders_summary(settings.holders_file)
    except (RuntimeError, ValueError, httpx.HTTPError) as e:
        raise SystemExit(f"Could not load holders: {e}")


def load_eligible_holders(settings: Settings, timeout_s: float) -> List[Holder]:
    log = logging.getLogger("census")

    census = load_census(settings, timeout_s)
    log.info(
        "Loaded %d holders with %d total tokens",
        census.total_holders,
        census.total_tokens,
    )

    excluded = set()
    if os.path.exists(settings.excluded_wallets_file):
        excluded = load_excluded_wallets(settings.excluded_wallets_file)
    log.info("Excluded wallets  : %d (%s)", len(excluded), settings.excluded_wallets_file)

    eligible = filter_excluded(census.holders, excluded)
    log.info("Excluded holders  : %d", len(census.holders) - len(eligible))
    log.info("Eligible holders  : %d", len(eligible))
    return eligible


def parse_rewards(values: List[str]) -> Dict[str, int]:
    rewards: Dict[str, int] = {}
    for item in values or []:
        tier, sep, count = item.rpartition("=")
        if not sep or not tier.strip():
            raise SystemExit(f"Bad --reward {item!r}; expected 'Tier Name=N'")
        try:
            rewards[tier.strip()] = int(count)
        except ValueError:
            raise SystemExit(f"Bad --reward {item!r}; count must be an integer")
    return rewards


def cmd_classify(args: argparse.Namespace) -> int:
    settings = settings_from_args(args)
    log = logging.getLogger("classify")
    eligible = load_eligible_holders(settings, args.timeout)

    rng = PseudoRandomSource(settings.seed)
    if args.method == "tier":
        groups = classify_by_token_count(eligible)
        filename = TIER_GROUPS_FILE
    elif args.method == "prefix":
        groups = classify_by_address_prefix(eligible, args.groups)
        filename = GROUPS_FILE
    else:
        groups = classify_randomly(eligible, args.groups, rng)
        filename = GROUPS_FILE

    stats = group_statistics(groups)
    log.info("Classified %d holders into %d groups", stats.total_holders, stats.total_groups)

    print("Group breakdown:")
    for name, size in stats.group_sizes.items():
        print(f"- {name}: {size} holders")

    out = save_groups(groups, settings.data_path(filename))
    print(f"\nSaved groups to: {out}")

    print("\nCSV files:")
    for name, path in save_groups_to_csv(groups, settings.data_dir):
        print(f"- {name}: {os.path.basename(path)}")
    return 0


def cmd_raffle(args: argparse.Namespace) -> int:
    settings = settings_from_args(args)
    log = logging.getLogger("raffle")

    groups_path = settings.data_path(TIER_GROUPS_FILE)
    if os.path.exists(groups_path):
        try:
            groups = load_groups(groups_path)
        except (RuntimeError, ValueError) as e:
            raise SystemExit(f"Could not load groups: {e}")
        log.info("Using existing %s", groups_path)
    else:
        log.info("%s not found. Classifying holders first...", groups_path)
        groups = classify_by_token_count(load_eligible_holders(settings, args.timeout))
        save_groups(groups, groups_path)

    stats = group_statistics(groups)
    log.info("Groups available  : %d", stats.total_groups)
    log.info("Eligible holders  : %d", stats.total_holders)

    rng = PseudoRandomSource(settings.seed)
    if args.total is not None:
        winners = select_winners_proportionally(groups, args.total, rng)
    else:
        winners = select_winners_from_groups(groups, args.per_group, rng)

    for name, members in winners.items():
        print(f"\n{name}:")
        for w in members:
            print(f"- {w.address} ({w.token_count} tokens)")

    wstats = winner_statistics(winners)
    print("\nWinner statistics:")
    print(f"Total winners : {wstats.total_winners}")
    print(f"Unique winners: {wstats.unique_winner_count}")

    out = save_json(groups_to_dict(winners), settings.data_path(WINNERS_FILE))
    print(f"\nSaved winners to: {out}")
    return 0


def cmd_contest(args: argparse.Namespace) -> int:
    settings = settings_from_args(args)
    rewards = dict(DEFAULT_TIER_REWARDS)
    rewards.update(parse_rewards(args.reward))

    eligible = load_eligible_holders(settings, args.timeout)
    groups = classify_by_token_count(eligible)

    print("========================================")
    print("🐰 INKBUNNIES HOLDER CONTEST")
    print("========================================")
    print("Tier breakdown:")
    for name, size in group_statistics(groups).group_sizes.items():
        print(f"- {name}: {size} holders")

    rng = PseudoRandomSource(settings.seed)
    try:
        result = run_contest(
            groups,
            rewards,
            rng=rng,
            raffle_rng=SecureRandomSource(),
        )
    except ValueError as e:
        raise SystemExit(str(e))

    print("----------------------------------------")
    print("Tier rewards (awarded/requested):")
    for tier, info in result.tier_results.items():
        print(f"- {tier}: {len(info.winners)}/{info.requested_winners}")
        for h in info.winners:
            print(f"    {h.address} ({h.token_count} tokens)")

    print(f"\nWhale Bunnies (guaranteed reward): {len(result.guaranteed)}")
    for h in result.guaranteed:
        print(f"- {h.address} ({h.token_count} tokens)")

    print("----------------------------------------")
    exclusive = result.exclusive_raffle
    if exclusive.winner is not None:
        print("🏆 EXCLUSIVE 1/1 NFT WINNER")
        print(f"Address       : {exclusive.winner.address}")
        print(f"Tokens        : {exclusive.winner.token_count}")
        print(f"Tickets       : {exclusive.total_tickets} across {exclusive.entrants} holders")
    else:
        print("Exclusive 1/1 NFT raffle could not determine a winner (no eligible tickets).")

    payload = contest_payload(result, eligible, CONTEST_RULES, selection_seed=rng.seed)
    results_path = save_json(payload, settings.data_path(CONTEST_RESULTS_FILE))
    wallets_path = save_winning_wallets_csv(result, settings.data_path(WINNING_WALLETS_FILE))
    logs_path = save_contest_log_csv(payload, settings.data_path(CONTEST_LOGS_FILE))

    print("----------------------------------------")
    print(f"🧾 Wrote results : {results_path}")
    print(f"🧾 Wrote wallets : {wallets_path}")
    print(f"🧾 Wrote log     : {logs_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bunnie-giveaway",
        description="InkBunnies NFT holder giveaway tool.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--data-dir", default=None, help="Directory for inputs and outputs.")
    p.add_argument("--holders", default=None, help="Holders summary JSON path.")
    p.add_argument("--holders-url", default=None, help="Fetch the holders summary from a URL.")
    p.add_argument("--excluded", default=None, help="Excluded wallets file (one per line).")
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for tier winner selection (the exclusive raffle is never seeded).",
    )
    p.add_argument("--timeout", type=float, default=60.0, help="HTTP timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("classify", help="Classify holders into groups.")
    c.add_argument(
        "--method",
        choices=["tier", "prefix", "random"],
        default="tier",
        help="Group by token-count tier, by address, or at random.",
    )
    c.add_argument(
        "--groups",
        type=int,
        default=DEFAULT_NUM_GROUPS,
        help="Number of groups for prefix/random grouping.",
    )
    c.set_defaults(func=cmd_classify)

    r = sub.add_parser("raffle", help="Select random winners from tier groups.")
    amount = r.add_mutually_exclusive_group()
    amount.add_argument("--per-group", type=int, default=1, help="Winners per group.")
    amount.add_argument(
        "--total",
        type=int,
        default=None,
        help="Total winners, spread proportionally to group size.",
    )
    r.set_defaults(func=cmd_raffle)

    k = sub.add_parser("contest", help="Run the holder contest and write results.")
    k.add_argument(
        "--reward",
        action="append",
        default=[],
        metavar="TIER=N",
        help="Override a tier's winner count (repeatable).",
    )
    k.set_defaults(func=cmd_contest)

    return p


def main(argv: List[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))
