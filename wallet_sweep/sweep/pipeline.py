"""
Sweep request pipeline.

validate address -> aggregate balances -> schedule notification ->
fee decision -> [insufficient: done] -> build plan -> finalize (unsigned or
backend-signed). Per-account failures are absorbed by the aggregator and the
builder; every other failure propagates as a SweepError (or an unexpected
exception) and ends the request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from solders.pubkey import Pubkey

from wallet_sweep.core.exceptions import InputError
from wallet_sweep.sweep.aggregator import BalanceAggregator
from wallet_sweep.sweep.builder import TransactionBuilder
from wallet_sweep.sweep.fees import FeeEstimator
from wallet_sweep.sweep.models import (
    SignedSubmission,
    SubmissionResult,
    SweepDecision,
    TransactionPlan,
    UnsignedPayload,
    WalletSnapshot,
)
from wallet_sweep.sweep.submission import Finalizer
from wallet_sweep.sweep_logging import bind_wallet, clear_wallet, get_logger

logger = get_logger(__name__)

INSUFFICIENT_BALANCE_MESSAGE = "Insufficient SOL balance for transaction"
BACKEND_SIGNED_MESSAGE = "Transaction sent successfully (backend-signed)"
MISSING_ADDRESS_MESSAGE = "Wallet address is required"
INVALID_ADDRESS_MESSAGE = "Invalid wallet address"


def parse_address(raw: str | None) -> Pubkey:
    """Validate a base58 wallet address; InputError when missing or malformed."""
    address = (raw or "").strip()
    if not address:
        raise InputError(MISSING_ADDRESS_MESSAGE)
    try:
        return Pubkey.from_string(address)
    except ValueError as e:
        raise InputError(INVALID_ADDRESS_MESSAGE) from e


@dataclass(frozen=True)
class SweepOutcome:
    snapshot: WalletSnapshot
    decision: SweepDecision
    plan: TransactionPlan | None = None
    result: SubmissionResult | None = None

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": True,
            "balance": self.snapshot.sol_balance,
            "splBalances": [h.to_response() for h in self.snapshot.holdings],
        }
        if isinstance(self.result, SignedSubmission):
            body["txid"] = self.result.txid
            body["message"] = BACKEND_SIGNED_MESSAGE
        elif isinstance(self.result, UnsignedPayload):
            body["transaction"] = self.result.transaction
        else:
            body["transaction"] = None
            body["message"] = INSUFFICIENT_BALANCE_MESSAGE
        return body


class SweepPipeline:
    def __init__(
        self,
        aggregator: BalanceAggregator,
        fees: FeeEstimator,
        builder: TransactionBuilder,
        finalizer: Finalizer,
        ledger: Any,
        notifier: Any = None,
    ) -> None:
        self._aggregator = aggregator
        self._fees = fees
        self._builder = builder
        self._finalizer = finalizer
        self._ledger = ledger
        self._notifier = notifier

    async def run(self, wallet_address: str | None) -> SweepOutcome:
        owner = parse_address(wallet_address)
        bind_wallet(str(owner))
        try:
            return await self._run(owner)
        finally:
            clear_wallet()

    async def _run(self, owner: Pubkey) -> SweepOutcome:
        snapshot = await self._aggregator.snapshot(owner)
        if self._notifier is not None:
            self._notifier.schedule(snapshot)

        decision = await self._fees.decide(snapshot.lamports, owner)
        if not decision.sufficient:
            return SweepOutcome(snapshot=snapshot, decision=decision)

        recent = await self._ledger.get_latest_blockhash()
        plan = await self._builder.build(
            snapshot,
            decision.sweep_lamports,
            self._finalizer.fee_payer(owner),
            recent,
        )
        result = await self._finalizer.finalize(plan)
        return SweepOutcome(snapshot=snapshot, decision=decision, plan=plan, result=result)
