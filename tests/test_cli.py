import csv
import json

import httpx
import pytest

from bunnie_giveaway import cli
from bunnie_giveaway.census_client import CensusClient
from bunnie_giveaway.randomness import SecureRandomSource


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["GIVEAWAY_DATA_DIR", "GIVEAWAY_HOLDERS_FILE", "GIVEAWAY_HOLDERS_URL",
                 "GIVEAWAY_EXCLUDED_FILE", "GIVEAWAY_SEED"]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_dir(tmp_path, holders_file):
    (tmp_path / "excluded_wallets.txt").write_text(
        "0x337ff83d7f2f80aff25de45cf77cae145bfce3d6\n", encoding="utf-8"
    )
    return tmp_path


def run(argv):
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    return exc.value.code


def test_classify_writes_tier_groups(data_dir, capsys):
    assert run(["--data-dir", str(data_dir), "classify"]) == 0

    groups = json.loads((data_dir / "tier_groups.json").read_text(encoding="utf-8"))
    assert {name: [h["address"] for h in members] for name, members in groups.items()} == {
        "Bunnie Holder": ["0xAAA1"],
        "Bunnie Believer": ["0xBBB2"],
        "Big Bunnie": ["0xCcC3"],
        "Whale Bunnie": ["0xDDD4"],
    }
    assert (data_dir / "Whale_Bunnie.csv").exists()
    assert "Bunnie Believer: 1 holders" in capsys.readouterr().out


def test_classify_prefix_groups(data_dir):
    assert run(["--data-dir", str(data_dir), "classify", "--method", "prefix", "--groups", "2"]) == 0

    groups = json.loads((data_dir / "groups.json").read_text(encoding="utf-8"))
    assert list(groups) == ["group_1", "group_2"]
    assert sum(len(m) for m in groups.values()) == 4


def test_raffle_classifies_when_needed(data_dir):
    assert run(["--data-dir", str(data_dir), "--seed", "3", "raffle"]) == 0

    assert (data_dir / "tier_groups.json").exists()
    winners = json.loads((data_dir / "winners.json").read_text(encoding="utf-8"))
    assert [len(w) for w in winners.values()] == [1, 1, 1, 1]


def test_raffle_proportional(data_dir):
    assert run(["--data-dir", str(data_dir), "--seed", "3", "raffle", "--total", "2"]) == 0

    winners = json.loads((data_dir / "winners.json").read_text(encoding="utf-8"))
    assert sum(len(w) for w in winners.values()) == 2


def test_contest_outputs(data_dir, capsys):
    assert run(["--data-dir", str(data_dir), "--seed", "1", "contest", "--reward", "Big Bunnie=0"]) == 0

    payload = json.loads((data_dir / "contest_results.json").read_text(encoding="utf-8"))
    assert payload["totals"]["eligibleHolders"] == 4
    assert payload["tierResults"]["Big Bunnie"]["winners"] == []
    # 2 + 6 + 11 + 16 * 3
    assert payload["exclusiveRaffle"]["totalTickets"] == 67

    with open(data_dir / "winning_wallets.csv", newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert {"0xAAA1", "0xBBB2", "0xDDD4"} <= {r["Address"] for r in rows}
    assert (data_dir / "contest_logs.csv").exists()
    assert "EXCLUSIVE 1/1 NFT WINNER" in capsys.readouterr().out


def test_contest_raffle_uses_secure_source(data_dir, monkeypatch):
    used = []

    class Spy(SecureRandomSource):
        def randbelow(self, n):
            used.append(n)
            return super().randbelow(n)

    monkeypatch.setattr(cli, "SecureRandomSource", Spy)
    assert run(["--data-dir", str(data_dir), "contest"]) == 0
    assert used == [67]


def test_bad_reward_flag(data_dir):
    code = run(["--data-dir", str(data_dir), "contest", "--reward", "Big Bunnie"])
    assert "Tier Name=N" in code


def test_guaranteed_tier_reward_rejected(data_dir):
    code = run(["--data-dir", str(data_dir), "contest", "--reward", "Whale Bunnie=2"])
    assert "Whale Bunnie" in code


def test_missing_holders_file(tmp_path):
    code = run(["--data-dir", str(tmp_path), "classify"])
    assert code.startswith("Could not load holders")


def test_parse_rewards():
    assert cli.parse_rewards(["Bunnie Holder=5", " Big Bunnie = 1"]) == {
        "Bunnie Holder": 5,
        "Big Bunnie": 1,
    }


def test_raffle_reuses_existing_tier_groups(data_dir):
    # the holders file would put 0xAAA1 in Bunnie Holder; the saved groups win
    (data_dir / "tier_groups.json").write_text(
        json.dumps({"Saved Tier": [{"address": "0xSAVED", "tokenCount": 3}]}),
        encoding="utf-8",
    )
    assert run(["--data-dir", str(data_dir), "raffle"]) == 0

    winners = json.loads((data_dir / "winners.json").read_text(encoding="utf-8"))
    assert winners == {"Saved Tier": [{"address": "0xSAVED", "tokenCount": 3, "tokens": None}]}


def test_raffle_with_broken_groups_file(data_dir):
    (data_dir / "tier_groups.json").write_text("{broken", encoding="utf-8")

    code = run(["--data-dir", str(data_dir), "raffle"])
    assert code.startswith("Could not load groups")


def test_raffle_with_malformed_group_member(data_dir):
    (data_dir / "tier_groups.json").write_text(
        json.dumps({"Big Bunnie": [{"tokenCount": 3}]}), encoding="utf-8"
    )

    code = run(["--data-dir", str(data_dir), "raffle"])
    assert code.startswith("Could not load groups")


def census_from(monkeypatch, handler):
    monkeypatch.setattr(
        cli,
        "CensusClient",
        lambda url, timeout_s: CensusClient(url, timeout_s, transport=httpx.MockTransport(handler)),
    )


def test_classify_from_holders_url(tmp_path, monkeypatch, holders_summary):
    census_from(monkeypatch, lambda request: httpx.Response(200, json=holders_summary))

    argv = ["--data-dir", str(tmp_path), "--holders-url", "https://example.test/holders.json", "classify"]
    assert run(argv) == 0

    groups = json.loads((tmp_path / "tier_groups.json").read_text(encoding="utf-8"))
    # no excluded wallets file in this data dir, so all five holders are placed
    assert sum(len(m) for m in groups.values()) == 5


def test_holders_url_http_error(tmp_path, monkeypatch):
    census_from(monkeypatch, lambda request: httpx.Response(404))

    argv = ["--data-dir", str(tmp_path), "--holders-url", "https://example.test/holders.json", "classify"]
    code = run(argv)
    assert code.startswith("Could not load holders")
    assert "404" in code


def test_holders_url_connection_error(tmp_path, monkeypatch):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    census_from(monkeypatch, refuse)

    argv = ["--data-dir", str(tmp_path), "--holders-url", "https://example.test/holders.json", "contest"]
    assert run(argv).startswith("Could not load holders")


def test_contest_records_selection_seed(data_dir):
    assert run(["--data-dir", str(data_dir), "--seed", "5", "contest"]) == 0

    payload = json.loads((data_dir / "contest_results.json").read_text(encoding="utf-8"))
    assert payload["selectionSeed"] == 5
