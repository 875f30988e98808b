from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

from .project_constants import EXCLUDED_WALLETS_FILE, HOLDERS_FILE


@dataclass(frozen=True)
class Settings:
    data_dir: str
    holders_file: str
    holders_url: str | None
    excluded_wallets_file: str
    seed: int | None

    def data_path(self, filename: str) -> str:
        return os.path.join(self.data_dir, filename)

    @staticmethod
    def from_env(
        data_dir: str | None = None,
        holders_file: str | None = None,
        holders_url: str | None = None,
        excluded_wallets_file: str | None = None,
        seed: int | None = None,
    ) -> "Settings":
        load_dotenv()

        # CLI values win over env, env wins over defaults.
        data_dir = data_dir or os.getenv("GIVEAWAY_DATA_DIR", "").strip() or "data"
        holders_file = (
            holders_file
            or os.getenv("GIVEAWAY_HOLDERS_FILE", "").strip()
            or os.path.join(data_dir, HOLDERS_FILE)
        )
        holders_url = holders_url or os.getenv("GIVEAWAY_HOLDERS_URL", "").strip() or None
        excluded_wallets_file = (
            excluded_wallets_file
            or os.getenv("GIVEAWAY_EXCLUDED_FILE", "").strip()
            or os.path.join(data_dir, EXCLUDED_WALLETS_FILE)
        )

        if seed is None:
            env_seed = os.getenv("GIVEAWAY_SEED", "").strip()
            if env_seed:
                try:
                    seed = int(env_seed)
                except ValueError:
                    raise RuntimeError(f"GIVEAWAY_SEED must be an integer, got {env_seed!r}")

        return Settings(
            data_dir=data_dir,
            holders_file=holders_file,
            holders_url=holders_url,
            excluded_wallets_file=excluded_wallets_file,
            seed=seed,
        )
