"""
Ledger package: async gateway to the Solana RPC surface.
"""

from wallet_sweep.ledger.client import LedgerClient, parse_token_account
from wallet_sweep.ledger.models import (
    LAMPORTS_PER_SOL,
    RecentBlockhash,
    TokenAccountState,
    lamports_to_sol,
)

__all__ = [
    "LAMPORTS_PER_SOL",
    "LedgerClient",
    "RecentBlockhash",
    "TokenAccountState",
    "lamports_to_sol",
    "parse_token_account",
]
