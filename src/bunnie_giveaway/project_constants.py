"""
Public rules of the InkBunnies holder giveaway.

These values define who lands in which tier, how many rewards each tier
gets and how raffle tickets are counted.
Changing them changes the outcome and MUST be publicly announced.
"""

import math

from .models import TierRange

# Evaluated in this order; a holder lands in the first matching tier.
DEFAULT_TIERS = (
    TierRange("Bunnie Holder", 1, 4),  # 1 <= x < 5
    TierRange("Bunnie Believer", 5, 9),  # 5 <= x < 10
    TierRange("Big Bunnie", 10, 14),  # 10 <= x < 15
    TierRange("Whale Bunnie", 15, math.inf),  # x >= 15
)

# Every member of this tier gets a reward, no draw.
GUARANTEED_TIER = "Whale Bunnie"

DEFAULT_TIER_REWARDS = {
    "Bunnie Holder": 3,
    "Bunnie Believer": 6,
    "Big Bunnie": 3,
}

# Exclusive raffle: 1 token = 1 ticket, whales (>= 15 tokens) get triple.
WHALE_TICKET_THRESHOLD = 15
WHALE_TICKET_MULTIPLIER = 3

DEFAULT_NUM_GROUPS = 10

CONTEST_RULES = {
    "description": "InkBunnies Holder Contest",
    "tierRewards": {
        "Bunnie Holder (1-4 NFTs)": "3 winners",
        "Bunnie Believer (5-9 NFTs)": "6 winners",
        "Big Bunnie (10-14 NFTs)": "3 winners",
        "Whale Bunnie (15+ NFTs)": "All holders receive 1 guaranteed NFT",
    },
    "exclusiveRaffle": (
        "Every NFT held = 1 ticket for the 1/1 Exclusive NFT "
        "(Whale Bunnies get 3 tickets per NFT)"
    ),
}

# Default file names (relative to the data directory)
HOLDERS_FILE = "holders_summary.json"
EXCLUDED_WALLETS_FILE = "excluded_wallets.txt"
TIER_GROUPS_FILE = "tier_groups.json"
GROUPS_FILE = "groups.json"
WINNERS_FILE = "winners.json"
CONTEST_RESULTS_FILE = "contest_results.json"
WINNING_WALLETS_FILE = "winning_wallets.csv"
CONTEST_LOGS_FILE = "contest_logs.csv"
