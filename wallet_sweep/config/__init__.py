"""
Configuration management for Wallet Sweep.

Loads and validates settings from environment variables and the optional
.env file. Exposes a single source of truth for all service configuration.
"""

from wallet_sweep.config.settings import Settings, SweepMode, get_settings, load_keypair

__all__ = ["Settings", "SweepMode", "get_settings", "load_keypair"]
