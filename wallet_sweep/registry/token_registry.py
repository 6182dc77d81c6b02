"""
Token registry: mint address -> display metadata (decimals, symbol, name, logo).

Loaded once at startup from the solana-labs token list JSON, filtered to the
active cluster's chainId, then frozen. Requests await wait_ready() before
reading, so nothing observes a half-loaded registry. A failed load is logged
and leaves the registry ready but empty; lookups then miss and callers fall
back to on-chain metadata.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping

import httpx

from wallet_sweep.sweep_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenInfo:
    """One token list entry."""

    address: str
    decimals: int | None
    symbol: str
    name: str
    logo_uri: str = ""

    @classmethod
    def from_list_item(cls, item: dict[str, Any]) -> "TokenInfo":
        decimals = item.get("decimals")
        return cls(
            address=str(item["address"]),
            decimals=int(decimals) if decimals is not None else None,
            symbol=str(item.get("symbol") or ""),
            name=str(item.get("name") or ""),
            logo_uri=str(item.get("logoURI") or ""),
        )


class TokenRegistry:
    """Load-once, read-many token metadata lookup for one cluster."""

    def __init__(self, chain_id: int) -> None:
        self._chain_id = chain_id
        self._tokens: Mapping[str, TokenInfo] = MappingProxyType({})
        self._ready = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def __len__(self) -> int:
        return len(self._tokens)

    async def wait_ready(self) -> None:
        """Readiness barrier: returns once the one-time load has finished (or failed)."""
        await self._ready.wait()

    def lookup(self, mint: str) -> TokenInfo | None:
        return self._tokens.get(mint)

    def load_entries(self, items: Iterable[dict[str, Any]]) -> int:
        """Populate from token list items and mark ready. Only the first load takes effect."""
        if self._ready.is_set():
            logger.warning("token_registry_reload_ignored", chain_id=self._chain_id)
            return len(self._tokens)
        tokens: dict[str, TokenInfo] = {}
        skipped = 0
        for item in items:
            if not isinstance(item, dict) or item.get("chainId") != self._chain_id:
                continue
            try:
                info = TokenInfo.from_list_item(item)
            except (KeyError, TypeError, ValueError):
                skipped += 1
                continue
            tokens[info.address] = info
        self._tokens = MappingProxyType(tokens)
        self._ready.set()
        logger.info("token_registry_loaded", chain_id=self._chain_id, tokens=len(tokens), skipped=skipped)
        return len(tokens)

    def mark_ready_empty(self) -> None:
        if not self._ready.is_set():
            self._ready.set()

    async def load(self, url: str, *, timeout_sec: float = 30.0, client: httpx.AsyncClient | None = None) -> int:
        """
        Fetch the token list and populate the registry.

        Never raises: on any failure the registry becomes ready and empty.
        Returns the number of tokens loaded.
        """
        try:
            if client is not None:
                resp = await client.get(url)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec)) as http:
                    resp = await http.get(url)
            resp.raise_for_status()
            data = resp.json()
            items = data.get("tokens", []) if isinstance(data, dict) else data
            return self.load_entries(items or [])
        except Exception as e:
            logger.warning("token_registry_load_failed", url=url, error=str(e))
            self.mark_ready_empty()
            return 0
