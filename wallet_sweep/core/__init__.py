"""
Core utilities: shared exceptions and cross-cutting concerns.
"""

from wallet_sweep.core.exceptions import (
    GENERIC_ERROR,
    FeeQueryError,
    InputError,
    LedgerError,
    LedgerUnavailable,
    NotificationError,
    SubmissionFailed,
    SweepError,
    TokenResolutionError,
)

__all__ = [
    "GENERIC_ERROR",
    "FeeQueryError",
    "InputError",
    "LedgerError",
    "LedgerUnavailable",
    "NotificationError",
    "SubmissionFailed",
    "SweepError",
    "TokenResolutionError",
]
