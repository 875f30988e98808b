from __future__ import annotations

from typing import Any

import httpx

from .holders import HolderCensus, parse_holders_summary


class CensusClient:
    """Fetches a published holders summary over HTTP."""

    def __init__(self, url: str, timeout_s: float = 60.0, transport: Any = None) -> None:
        self.url = url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def fetch_summary(self) -> HolderCensus:
        resp = self.client.get(self.url)
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as e:
            raise RuntimeError(f"Census at {self.url} did not return JSON: {e}") from e
        return parse_holders_summary(data)
