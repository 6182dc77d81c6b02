"""
Sweep package: balance aggregation, fee decision, transaction assembly and
submission for one wallet per request.
"""

from wallet_sweep.sweep.aggregator import BalanceAggregator
from wallet_sweep.sweep.builder import MEMO_PROGRAM_ID, TransactionBuilder
from wallet_sweep.sweep.fees import SIGNATURE_BUFFER, FeeEstimator
from wallet_sweep.sweep.pipeline import SweepOutcome, SweepPipeline, parse_address
from wallet_sweep.sweep.submission import (
    BackendSignedFinalizer,
    UnsignedFinalizer,
    decode_transaction,
    make_finalizer,
)

__all__ = [
    "MEMO_PROGRAM_ID",
    "SIGNATURE_BUFFER",
    "BackendSignedFinalizer",
    "BalanceAggregator",
    "FeeEstimator",
    "SweepOutcome",
    "SweepPipeline",
    "TransactionBuilder",
    "UnsignedFinalizer",
    "decode_transaction",
    "make_finalizer",
    "parse_address",
]
