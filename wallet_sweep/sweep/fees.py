"""
Fee estimator: current fee floor, reserved fee, and the sweepable SOL amount.
"""

from __future__ import annotations

from typing import Any

from solders.pubkey import Pubkey

from wallet_sweep.core.exceptions import FeeQueryError, LedgerError
from wallet_sweep.sweep.models import FeeQuote, SweepDecision
from wallet_sweep.sweep_logging import get_logger

logger = get_logger(__name__)

# Reserve for three signatures regardless of the plan's actual signer count
SIGNATURE_BUFFER = 3


class FeeEstimator:
    def __init__(self, ledger: Any, signature_buffer: int = SIGNATURE_BUFFER) -> None:
        if signature_buffer < 1:
            raise ValueError("signature_buffer must be >= 1")
        self._ledger = ledger
        self._signature_buffer = signature_buffer

    async def quote(self, payer: Pubkey) -> FeeQuote:
        """Fresh quote per call; fee floors drift so nothing is cached."""
        try:
            per_signature = await self._ledger.get_fee_per_signature(payer)
        except LedgerError as e:
            logger.error("fee_query_failed", error=str(e))
            raise FeeQueryError() from e
        return FeeQuote(lamports_per_signature=per_signature, signature_buffer=self._signature_buffer)

    async def decide(self, lamports: int, payer: Pubkey) -> SweepDecision:
        """Sweep amount is lamports - reserved; None when lamports <= reserved."""
        quote = await self.quote(payer)
        if lamports <= quote.reserved:
            logger.info("sweep_insufficient_balance", lamports=lamports, reserved=quote.reserved)
            return SweepDecision(quote=quote, sweep_lamports=None)
        return SweepDecision(quote=quote, sweep_lamports=lamports - quote.reserved)
