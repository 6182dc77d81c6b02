"""
Balance aggregator: native balance + SPL token holdings for one address.

Reads the native balance and the owner's SPL Token program accounts, then
resolves every account concurrently. Each account yields Resolved(holding) or
Skipped(reason); a failing account never aborts the snapshot. Metadata comes
from the token registry, then the on-chain mint account, then defaults.
Holdings are sorted by mint after all resolutions finish, since completion
order varies between runs.
"""

from __future__ import annotations

import asyncio
from typing import Any

from solders.pubkey import Pubkey

from wallet_sweep.core.exceptions import LedgerError, LedgerUnavailable
from wallet_sweep.registry import TokenRegistry
from wallet_sweep.sweep.models import ResolutionOutcome, Resolved, Skipped, TokenHolding, WalletSnapshot
from wallet_sweep.sweep_logging import get_logger

logger = get_logger(__name__)

DEFAULT_DECIMALS = 9
DEFAULT_SYMBOL = "TOKEN"
SKIP_ZERO_BALANCE = "zero_balance"


def default_token_name(mint: str) -> str:
    return f"Token ({mint[:4]}...)"


class BalanceAggregator:
    """Builds a WalletSnapshot from the ledger and the token registry."""

    def __init__(self, ledger: Any, registry: TokenRegistry) -> None:
        self._ledger = ledger
        self._registry = registry

    async def snapshot(self, owner: Pubkey) -> WalletSnapshot:
        """
        Aggregate balances for owner.

        Raises LedgerUnavailable when the native balance or the token account
        index cannot be read; per-account failures only drop that account.
        """
        address = str(owner)
        try:
            lamports = await self._ledger.get_balance(owner)
        except LedgerError as e:
            logger.error("native_balance_failed", wallet=address, error=str(e))
            raise LedgerUnavailable() from e
        try:
            accounts = await self._ledger.get_token_accounts(owner)
        except LedgerError as e:
            logger.error("token_accounts_failed", wallet=address, error=str(e))
            raise LedgerUnavailable() from e

        await self._registry.wait_ready()
        outcomes = await self.resolve_all(accounts)
        holdings = sorted(
            (o.holding for o in outcomes if isinstance(o, Resolved)),
            key=lambda h: (h.mint, h.account),
        )
        skipped = [o for o in outcomes if isinstance(o, Skipped) and o.reason != SKIP_ZERO_BALANCE]
        logger.info(
            "wallet_snapshot_built",
            wallet=address,
            lamports=lamports,
            token_accounts=len(accounts),
            holdings=len(holdings),
            skipped=len(skipped),
        )
        return WalletSnapshot(address=address, lamports=lamports, holdings=tuple(holdings))

    async def resolve_all(self, accounts: list[str]) -> list[ResolutionOutcome]:
        """Resolve all accounts concurrently; outcomes in completion order."""
        outcomes: list[ResolutionOutcome] = []
        for fut in asyncio.as_completed([self.resolve_account(a) for a in accounts]):
            outcomes.append(await fut)
        return outcomes

    async def resolve_account(self, account: str) -> ResolutionOutcome:
        try:
            state = await self._ledger.get_token_account(account)
            if state.amount <= 0:
                return Skipped(account=account, reason=SKIP_ZERO_BALANCE)
            decimals, symbol, name, logo_uri = await self._resolve_metadata(state.mint)
            return Resolved(
                TokenHolding(
                    mint=state.mint,
                    account=account,
                    raw_amount=state.amount,
                    decimals=decimals,
                    symbol=symbol,
                    name=name,
                    logo_uri=logo_uri,
                )
            )
        except Exception as e:
            logger.warning("token_account_skipped", account=account, error=str(e))
            return Skipped(account=account, reason=str(e) or type(e).__name__)

    async def _resolve_metadata(self, mint: str) -> tuple[int, str, str, str]:
        """Registry fields first; on-chain mint decimals only when the registry has none; then defaults."""
        info = self._registry.lookup(mint)
        decimals = info.decimals if info else None
        symbol = info.symbol if info else ""
        name = info.name if info else ""
        logo_uri = info.logo_uri if info else ""

        if decimals is None:
            try:
                decimals = await self._ledger.get_mint_decimals(mint)
            except LedgerError as e:
                logger.debug("mint_lookup_failed", mint=mint, error=str(e))
        return (
            decimals if decimals is not None else DEFAULT_DECIMALS,
            symbol or DEFAULT_SYMBOL,
            name or default_token_name(mint),
            logo_uri,
        )
