"""
Structured logging for Wallet Sweep.

JSON logs with timestamp, wallet, event_type. Use get_logger() in every module.
"""

from wallet_sweep.sweep_logging.logger import (
    bind_wallet,
    clear_wallet,
    configure_structlog,
    get_logger,
)

__all__ = [
    "bind_wallet",
    "clear_wallet",
    "configure_structlog",
    "get_logger",
]
