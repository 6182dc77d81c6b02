"""
Tests for TokenRegistry: chainId filtering, load-once, readiness on failure.
"""

from __future__ import annotations

import asyncio

import httpx

from wallet_sweep.registry import TokenRegistry

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
TOKEN_LIST = {
    "name": "Solana Token List",
    "tokens": [
        {"chainId": 101, "address": USDC, "symbol": "USDC", "name": "USD Coin", "decimals": 6, "logoURI": "https://x/usdc.png"},
        {"chainId": 103, "address": USDC, "symbol": "dUSDC", "name": "Devnet USDC", "decimals": 6},
        {"chainId": 101, "symbol": "BROKEN"},
    ],
}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_load_filters_by_chain_id():
    async def scenario():
        registry = TokenRegistry(101)
        async with _client(lambda request: httpx.Response(200, json=TOKEN_LIST)) as client:
            count = await registry.load("https://tokens.example/list.json", client=client)
        return registry, count

    registry, count = asyncio.run(scenario())
    assert count == 1
    assert registry.is_ready
    info = registry.lookup(USDC)
    assert info is not None
    assert (info.symbol, info.name, info.decimals, info.logo_uri) == ("USDC", "USD Coin", 6, "https://x/usdc.png")
    assert registry.lookup("unknown") is None


def test_failed_load_leaves_registry_ready_and_empty():
    async def scenario():
        registry = TokenRegistry(101)
        async with _client(lambda request: httpx.Response(503)) as client:
            count = await registry.load("https://tokens.example/list.json", client=client)
        await asyncio.wait_for(registry.wait_ready(), timeout=1)
        return registry, count

    registry, count = asyncio.run(scenario())
    assert count == 0
    assert registry.is_ready
    assert len(registry) == 0


def test_registry_is_immutable_after_first_load():
    registry = TokenRegistry(101)
    registry.load_entries(TOKEN_LIST["tokens"])
    registry.load_entries([{"chainId": 101, "address": "Other", "symbol": "O", "name": "O", "decimals": 0}])
    assert len(registry) == 1
    assert registry.lookup("Other") is None


def test_plain_list_payload_accepted():
    async def scenario():
        registry = TokenRegistry(103)
        async with _client(lambda request: httpx.Response(200, json=TOKEN_LIST["tokens"])) as client:
            await registry.load("https://tokens.example/list.json", client=client)
        return registry

    registry = asyncio.run(scenario())
    assert registry.lookup(USDC).symbol == "dUSDC"
