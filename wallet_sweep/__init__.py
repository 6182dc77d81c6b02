"""
Wallet Sweep: Solana wallet inspection and sweep backend.

Aggregates the SOL balance and SPL token holdings of one address, alerts an
operator on Telegram, and builds a transaction moving everything to a fixed
destination. The transaction is returned unsigned, or signed and submitted
by the backend when a signing key is configured.
"""

__version__ = "0.1.0"
