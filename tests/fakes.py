"""
Test doubles shared by the Wallet Sweep test suite.

FakeLedger stands in for LedgerClient: balances, token accounts and mint
decimals come from plain dicts, failures are injected as exceptions, and
every submission/confirmation call is recorded for call-count assertions.
"""

from __future__ import annotations

import asyncio
from typing import Any

from solders.hash import Hash
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from wallet_sweep.core.exceptions import LedgerError
from wallet_sweep.ledger.models import RecentBlockhash, TokenAccountState
from wallet_sweep.registry import TokenRegistry

MAINNET_CHAIN_ID = 101
FEE_PER_SIGNATURE = 5000
DESTINATION = Pubkey.from_string("84vka944L9qFdBZKHEvpfDp9qqJ5sfcjDXaQ3wjxVRLM")


class FakeLedger:
    """In-memory LedgerClient double."""

    def __init__(
        self,
        lamports: int | Exception = 0,
        *,
        token_accounts: list[str] | Exception | None = None,
        accounts: dict[str, TokenAccountState | Exception] | None = None,
        mint_decimals: dict[str, int | Exception] | None = None,
        fee_per_signature: int | Exception = FEE_PER_SIGNATURE,
        send_result: str | Exception = "5" * 64,
        confirm_result: str | Exception = "confirmed",
        delays: dict[str, float] | None = None,
    ) -> None:
        self.lamports = lamports
        self.token_accounts = token_accounts if token_accounts is not None else []
        self.accounts = accounts or {}
        self.mint_decimals = mint_decimals or {}
        self.fee_per_signature = fee_per_signature
        self.send_result = send_result
        self.confirm_result = confirm_result
        self.delays = delays or {}
        self.blockhash = RecentBlockhash(blockhash=Hash.new_unique(), last_valid_block_height=1000)
        self.sent: list[bytes] = []
        self.confirmed: list[str] = []
        self.account_reads: list[str] = []
        self.closed = False

    @staticmethod
    def _value(v: Any) -> Any:
        if isinstance(v, Exception):
            raise v
        return v

    async def get_balance(self, owner: Pubkey) -> int:
        return self._value(self.lamports)

    async def get_token_accounts(self, owner: Pubkey) -> list[str]:
        return list(self._value(self.token_accounts))

    async def get_token_account(self, address: str) -> TokenAccountState:
        self.account_reads.append(address)
        if address in self.delays:
            await asyncio.sleep(self.delays[address])
        if address not in self.accounts:
            raise LedgerError(f"account {address} not found")
        return self._value(self.accounts[address])

    async def get_mint_decimals(self, mint: str) -> int:
        if mint not in self.mint_decimals:
            raise LedgerError(f"mint {mint} not found")
        return self._value(self.mint_decimals[mint])

    async def get_latest_blockhash(self) -> RecentBlockhash:
        return self.blockhash

    async def get_fee_per_signature(self, payer: Pubkey) -> int:
        return self._value(self.fee_per_signature)

    async def send_raw_transaction(self, raw: bytes) -> str:
        self.sent.append(raw)
        return self._value(self.send_result)

    async def confirm_transaction(self, txid: str, last_valid_block_height: int | None = None) -> str:
        self.confirmed.append(txid)
        return self._value(self.confirm_result)

    async def close(self) -> None:
        self.closed = True


class RecordingNotifier:
    """Notifier double that records scheduled snapshots."""

    def __init__(self) -> None:
        self.snapshots: list[Any] = []

    def schedule(self, snapshot: Any) -> None:
        self.snapshots.append(snapshot)

    async def drain(self) -> None:
        return None


def ata(owner: Pubkey, mint: Pubkey) -> str:
    return str(get_associated_token_address(owner, mint))


def token_state(address: str, mint: Pubkey | str, amount: int) -> TokenAccountState:
    return TokenAccountState(address=address, mint=str(mint), amount=amount)


def registry_with(*items: dict[str, Any]) -> TokenRegistry:
    registry = TokenRegistry(MAINNET_CHAIN_ID)
    registry.load_entries([{"chainId": MAINNET_CHAIN_ID, **item} for item in items])
    return registry


