"""
Data models for ledger reads.

Normalized views of the RPC responses the sweep pipeline consumes, so callers
never handle solana-py response objects directly.
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.hash import Hash

LAMPORTS_PER_SOL = 1_000_000_000


@dataclass(frozen=True)
class TokenAccountState:
    """One SPL token account as read from the ledger (jsonParsed)."""

    address: str
    mint: str
    amount: int  # raw amount in the mint's smallest unit


@dataclass(frozen=True)
class RecentBlockhash:
    blockhash: Hash
    last_valid_block_height: int


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL
