"""
Data models for the sweep pipeline.

Snapshot of one wallet (native balance + SPL holdings), per-account resolution
outcomes, the fee decision, the assembled transaction plan, and the two
mutually exclusive submission results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey

from wallet_sweep.core.exceptions import TokenResolutionError
from wallet_sweep.ledger.models import lamports_to_sol


@dataclass(frozen=True)
class TokenHolding:
    """Non-zero SPL token balance with resolved display metadata."""

    mint: str
    account: str
    raw_amount: int
    decimals: int
    symbol: str
    name: str
    logo_uri: str = ""

    def __post_init__(self) -> None:
        if self.raw_amount <= 0:
            raise TokenResolutionError(f"holding for {self.mint} must have a positive amount")

    @property
    def ui_amount(self) -> float:
        return self.raw_amount / (10 ** self.decimals)

    def to_response(self) -> dict[str, Any]:
        return {
            "mint": self.mint,
            "balance": self.ui_amount,
            "decimals": self.decimals,
            "symbol": self.symbol,
            "name": self.name,
            "logoURI": self.logo_uri,
        }


@dataclass(frozen=True)
class WalletSnapshot:
    address: str
    lamports: int
    holdings: tuple[TokenHolding, ...] = ()

    @property
    def sol_balance(self) -> float:
        return lamports_to_sol(self.lamports)


@dataclass(frozen=True)
class Resolved:
    holding: TokenHolding


@dataclass(frozen=True)
class Skipped:
    account: str
    reason: str


ResolutionOutcome = Union[Resolved, Skipped]


@dataclass(frozen=True)
class FeeQuote:
    lamports_per_signature: int
    signature_buffer: int

    @property
    def reserved(self) -> int:
        return self.lamports_per_signature * self.signature_buffer


@dataclass(frozen=True)
class SweepDecision:
    """sweep_lamports is None when the balance cannot cover the reserved fee."""

    quote: FeeQuote
    sweep_lamports: int | None

    @property
    def sufficient(self) -> bool:
        return self.sweep_lamports is not None


@dataclass(frozen=True)
class TransactionPlan:
    """Ordered sweep instructions: token transfers, native transfer, memo."""

    fee_payer: Pubkey
    owner: Pubkey
    destination: Pubkey
    instructions: tuple[Instruction, ...]
    recent_blockhash: Hash
    last_valid_block_height: int
    token_transfers: int = 0

    def to_message(self) -> Message:
        return Message.new_with_blockhash(list(self.instructions), self.fee_payer, self.recent_blockhash)


@dataclass(frozen=True)
class UnsignedPayload:
    transaction: str  # base64 wire transaction with empty signatures


@dataclass(frozen=True)
class SignedSubmission:
    txid: str
    confirmation_status: str


SubmissionResult = Union[UnsignedPayload, SignedSubmission]
