"""
Token registry package: read-only token metadata loaded once per process.
"""

from wallet_sweep.registry.token_registry import TokenInfo, TokenRegistry

__all__ = ["TokenInfo", "TokenRegistry"]
