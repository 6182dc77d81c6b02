"""
Tests for BalanceAggregator: zero filtering, per-account failure isolation,
metadata fallback chain, fatal balance failure, readiness barrier.
"""

from __future__ import annotations

import asyncio

import pytest
from solders.pubkey import Pubkey

from tests.fakes import FakeLedger, registry_with, token_state
from wallet_sweep.core.exceptions import LedgerError, LedgerUnavailable
from wallet_sweep.registry import TokenRegistry
from wallet_sweep.sweep.aggregator import (
    DEFAULT_DECIMALS,
    DEFAULT_SYMBOL,
    BalanceAggregator,
    default_token_name,
)
from wallet_sweep.sweep.models import Resolved, Skipped


def test_no_token_accounts(wallet, empty_registry):
    ledger = FakeLedger(2_500_000_000)
    snap = asyncio.run(BalanceAggregator(ledger, empty_registry).snapshot(wallet))
    assert snap.address == str(wallet)
    assert snap.lamports == 2_500_000_000
    assert snap.sol_balance == 2.5
    assert snap.holdings == ()


def test_zero_amount_accounts_filtered(wallet, empty_registry):
    mint_a, mint_b = Pubkey.new_unique(), Pubkey.new_unique()
    acc_a, acc_b = str(Pubkey.new_unique()), str(Pubkey.new_unique())
    ledger = FakeLedger(
        1_000_000,
        token_accounts=[acc_a, acc_b],
        accounts={acc_a: token_state(acc_a, mint_a, 0), acc_b: token_state(acc_b, mint_b, 42)},
        mint_decimals={str(mint_b): 2},
    )
    snap = asyncio.run(BalanceAggregator(ledger, empty_registry).snapshot(wallet))
    assert [h.mint for h in snap.holdings] == [str(mint_b)]
    assert snap.holdings[0].raw_amount == 42
    assert snap.holdings[0].ui_amount == 0.42


def test_failing_account_is_dropped_not_fatal(wallet, empty_registry):
    mint = Pubkey.new_unique()
    good, bad, missing = (str(Pubkey.new_unique()) for _ in range(3))
    ledger = FakeLedger(
        10,
        token_accounts=[good, bad, missing],
        accounts={good: token_state(good, mint, 7), bad: LedgerError("timeout")},
        mint_decimals={str(mint): 0},
    )
    aggregator = BalanceAggregator(ledger, empty_registry)
    outcomes = asyncio.run(aggregator.resolve_all([good, bad, missing]))
    resolved = [o for o in outcomes if isinstance(o, Resolved)]
    skipped = {o.account for o in outcomes if isinstance(o, Skipped)}
    assert len(resolved) == 1
    assert skipped == {bad, missing}

    snap = asyncio.run(aggregator.snapshot(wallet))
    assert len(snap.holdings) == 1
    assert snap.holdings[0].decimals == 0


def test_registry_metadata_used_without_chain_lookup(wallet):
    mint = Pubkey.new_unique()
    acc = str(Pubkey.new_unique())
    registry = registry_with(
        {"address": str(mint), "decimals": 6, "symbol": "USDC", "name": "USD Coin", "logoURI": "https://x/usdc.png"}
    )
    ledger = FakeLedger(
        10,
        token_accounts=[acc],
        accounts={acc: token_state(acc, mint, 1_500_000)},
        mint_decimals={str(mint): LedgerError("must not be called")},
    )
    snap = asyncio.run(BalanceAggregator(ledger, registry).snapshot(wallet))
    holding = snap.holdings[0]
    assert (holding.symbol, holding.name, holding.decimals) == ("USDC", "USD Coin", 6)
    assert holding.to_response() == {
        "mint": str(mint),
        "balance": 1.5,
        "decimals": 6,
        "symbol": "USDC",
        "name": "USD Coin",
        "logoURI": "https://x/usdc.png",
    }


def test_unknown_mint_uses_chain_decimals_and_default_labels(wallet, empty_registry):
    mint = Pubkey.new_unique()
    acc = str(Pubkey.new_unique())
    ledger = FakeLedger(
        10,
        token_accounts=[acc],
        accounts={acc: token_state(acc, mint, 5)},
        mint_decimals={str(mint): 3},
    )
    holding = asyncio.run(BalanceAggregator(ledger, empty_registry).snapshot(wallet)).holdings[0]
    assert holding.decimals == 3
    assert holding.symbol == DEFAULT_SYMBOL
    assert holding.name == default_token_name(str(mint))
    assert holding.name == f"Token ({str(mint)[:4]}...)"
    assert holding.logo_uri == ""


def test_mint_lookup_failure_falls_back_to_defaults(wallet, empty_registry):
    mint = Pubkey.new_unique()
    acc = str(Pubkey.new_unique())
    ledger = FakeLedger(10, token_accounts=[acc], accounts={acc: token_state(acc, mint, 5)})
    holding = asyncio.run(BalanceAggregator(ledger, empty_registry).snapshot(wallet)).holdings[0]
    assert holding.decimals == DEFAULT_DECIMALS
    assert holding.symbol == DEFAULT_SYMBOL


def test_partial_registry_entry_keeps_known_fields(wallet):
    mint = Pubkey.new_unique()
    acc = str(Pubkey.new_unique())
    registry = registry_with({"address": str(mint), "decimals": 4, "symbol": "ABC", "name": ""})
    ledger = FakeLedger(
        10,
        token_accounts=[acc],
        accounts={acc: token_state(acc, mint, 5)},
        mint_decimals={str(mint): 9},
    )
    holding = asyncio.run(BalanceAggregator(ledger, registry).snapshot(wallet)).holdings[0]
    assert holding.decimals == 4
    assert holding.symbol == "ABC"
    assert holding.name == default_token_name(str(mint))


def test_balance_failure_is_fatal(wallet, empty_registry):
    ledger = FakeLedger(LedgerError("rpc down"))
    with pytest.raises(LedgerUnavailable) as info:
        asyncio.run(BalanceAggregator(ledger, empty_registry).snapshot(wallet))
    assert isinstance(info.value.__cause__, LedgerError)


def test_holdings_sorted_by_mint_regardless_of_completion_order(wallet, empty_registry):
    mints = [Pubkey.new_unique() for _ in range(3)]
    accounts = [str(Pubkey.new_unique()) for _ in range(3)]
    ledger = FakeLedger(
        10,
        token_accounts=accounts,
        accounts={a: token_state(a, m, 1) for a, m in zip(accounts, mints)},
        mint_decimals={str(m): 0 for m in mints},
        # first discovered account finishes last
        delays={accounts[0]: 0.05, accounts[1]: 0.01},
    )
    snap = asyncio.run(BalanceAggregator(ledger, empty_registry).snapshot(wallet))
    assert [h.mint for h in snap.holdings] == sorted(str(m) for m in mints)


def test_snapshot_idempotent_on_quiet_ledger(wallet, empty_registry):
    mint = Pubkey.new_unique()
    acc = str(Pubkey.new_unique())
    ledger = FakeLedger(10, token_accounts=[acc], accounts={acc: token_state(acc, mint, 9)})
    aggregator = BalanceAggregator(ledger, empty_registry)
    assert asyncio.run(aggregator.snapshot(wallet)) == asyncio.run(aggregator.snapshot(wallet))


def test_snapshot_waits_for_registry_readiness(wallet):
    mint = Pubkey.new_unique()
    acc = str(Pubkey.new_unique())
    ledger = FakeLedger(10, token_accounts=[acc], accounts={acc: token_state(acc, mint, 1)})

    async def scenario():
        registry = TokenRegistry(101)
        task = asyncio.create_task(BalanceAggregator(ledger, registry).snapshot(wallet))
        await asyncio.sleep(0.01)
        assert not task.done()
        registry.load_entries([{"chainId": 101, "address": str(mint), "decimals": 2, "symbol": "RDY", "name": "Ready"}])
        return await task

    snap = asyncio.run(scenario())
    assert snap.holdings[0].symbol == "RDY"


def test_registry_zero_decimals_not_replaced_by_chain(wallet):
    mint = Pubkey.new_unique()
    acc = str(Pubkey.new_unique())
    registry = registry_with({"address": str(mint), "decimals": 0, "symbol": "NFT", "name": ""})
    ledger = FakeLedger(
        10,
        token_accounts=[acc],
        accounts={acc: token_state(acc, mint, 1)},
        mint_decimals={str(mint): 6},
    )
    holding = asyncio.run(BalanceAggregator(ledger, registry).snapshot(wallet)).holdings[0]
    assert holding.decimals == 0
    assert holding.ui_amount == 1.0
