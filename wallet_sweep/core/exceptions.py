"""
Application-level exceptions.

Every failure the request pipeline can surface derives from SweepError and
carries the HTTP status and public error text used by the API server. The
underlying cause stays on ``__cause__`` for logging; only SubmissionFailed
exposes its detail to the caller.
"""

from __future__ import annotations

GENERIC_ERROR = "Failed to process wallet address"


class SweepError(Exception):
    """Base class for errors that terminate a sweep request."""

    status_code: int = 500
    public_message: str = GENERIC_ERROR

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)

    def to_response(self) -> dict[str, str]:
        return {"error": self.public_message}


class InputError(SweepError):
    """Missing or malformed wallet address."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.public_message = message


class LedgerError(Exception):
    """An RPC call to the ledger failed or returned an unusable result."""


class LedgerUnavailable(SweepError):
    """Native balance (or the token account index) could not be read."""


class FeeQueryError(SweepError):
    """The current fee floor could not be determined."""


class SubmissionFailed(SweepError):
    """Signing, broadcast, or confirmation failed in backend-signed mode."""

    public_message = "Transaction failed"

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details

    def to_response(self) -> dict[str, str]:
        return {"error": self.public_message, "details": self.details}


class TokenResolutionError(Exception):
    """One token account could not be resolved; the account is skipped."""


class NotificationError(Exception):
    """The operator notification could not be delivered."""
