"""
Shared pytest fixtures for the giveaway tests.
"""

import json

import pytest

from bunnie_giveaway.models import Holder


class ScriptedRandomSource:
    """Replays fixed values; records every bound it was asked for."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randbelow(self, n):
        self.calls.append(n)
        value = self.values.pop(0)
        assert 0 <= value < n, f"scripted value {value} outside [0, {n})"
        return value


@pytest.fixture
def scripted_rng():
    """Factory for a random source that returns the given values in order."""
    return ScriptedRandomSource


@pytest.fixture
def make_holders():
    def _make(*pairs):
        return [Holder(address=addr, token_count=count) for addr, count in pairs]

    return _make


@pytest.fixture
def contest_holders(make_holders):
    """One holder per default tier."""
    return make_holders(("A", 3), ("B", 7), ("C", 12), ("D", 20))


@pytest.fixture
def holders_summary():
    return {
        "totalHolders": 5,
        "totalTokens": 41,
        "holders": [
            {"address": "0xAAA1", "tokenCount": 2, "tokens": ["1", "2"]},
            {"address": "0xBBB2", "tokenCount": 6},
            {"address": "0xCcC3", "tokenCount": 11},
            {"address": "0xDDD4", "tokenCount": 16},
            {"address": "0x337FF83D7f2F80AFF25DE45CF77CAE145bfcE3D6", "tokenCount": 6},
        ],
    }


@pytest.fixture
def holders_file(tmp_path, holders_summary):
    path = tmp_path / "holders_summary.json"
    path.write_text(json.dumps(holders_summary), encoding="utf-8")
    return path
