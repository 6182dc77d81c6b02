"""
Submission branch: what happens to a built TransactionPlan.

Two finalizers, chosen once at startup from SweepMode:

- UnsignedFinalizer: wallet pays fees; the transaction is serialized with
  empty signature slots and returned base64-encoded for external signing.
- BackendSignedFinalizer: the configured keypair pays fees and is the only
  signer applied here; the transaction is broadcast and confirmed once.
  Any signing, broadcast or confirmation failure raises SubmissionFailed.
"""

from __future__ import annotations

import base64
from typing import Any, Protocol

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from wallet_sweep.config.settings import Settings, SweepMode
from wallet_sweep.core.exceptions import SubmissionFailed
from wallet_sweep.sweep.models import SignedSubmission, SubmissionResult, TransactionPlan, UnsignedPayload
from wallet_sweep.sweep_logging import get_logger

logger = get_logger(__name__)


class Finalizer(Protocol):
    mode: SweepMode

    def fee_payer(self, owner: Pubkey) -> Pubkey: ...

    async def finalize(self, plan: TransactionPlan) -> SubmissionResult: ...


def encode_unsigned(plan: TransactionPlan) -> str:
    tx = Transaction.new_unsigned(plan.to_message())
    return base64.b64encode(bytes(tx)).decode("ascii")


def decode_transaction(payload: str) -> Transaction:
    """Inverse of encode_unsigned (also accepts signed payloads)."""
    return Transaction.from_bytes(base64.b64decode(payload))


class UnsignedFinalizer:
    mode = SweepMode.UNSIGNED

    def fee_payer(self, owner: Pubkey) -> Pubkey:
        return owner

    async def finalize(self, plan: TransactionPlan) -> UnsignedPayload:
        payload = encode_unsigned(plan)
        logger.info("sweep_unsigned_serialized", wallet=str(plan.owner), size=len(payload))
        return UnsignedPayload(transaction=payload)


class BackendSignedFinalizer:
    mode = SweepMode.BACKEND_SIGNED

    def __init__(self, ledger: Any, signer: Keypair) -> None:
        self._ledger = ledger
        self._signer = signer

    def fee_payer(self, owner: Pubkey) -> Pubkey:
        return self._signer.pubkey()

    def sign(self, plan: TransactionPlan) -> Transaction:
        tx = Transaction.new_unsigned(plan.to_message())
        tx.partial_sign([self._signer], plan.recent_blockhash)
        return tx

    async def finalize(self, plan: TransactionPlan) -> SignedSubmission:
        try:
            tx = self.sign(plan)
            txid = await self._ledger.send_raw_transaction(bytes(tx))
            status = await self._ledger.confirm_transaction(txid, plan.last_valid_block_height)
        except Exception as e:
            logger.error("sweep_submission_failed", wallet=str(plan.owner), error=str(e))
            raise SubmissionFailed(str(e)) from e
        logger.info("sweep_submitted", wallet=str(plan.owner), txid=txid, confirmation_status=status)
        return SignedSubmission(txid=txid, confirmation_status=status)


def make_finalizer(settings: Settings, ledger: Any) -> UnsignedFinalizer | BackendSignedFinalizer:
    """Select the finalizer for the configured mode."""
    if settings.mode is SweepMode.BACKEND_SIGNED:
        return BackendSignedFinalizer(ledger, settings.signer)
    return UnsignedFinalizer()
