"""
Environment variable loading and network resolution.

- SOLANA_NETWORK: mainnet | devnet | testnet (default: mainnet)
- SOLANA_RPC_URL: RPC endpoint override
- HELIUS_API_KEY: Helius API key (used for the RPC URL when SOLANA_RPC_URL is unset)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is wallet_sweep/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
DEVNET_RPC_URL = "https://api.devnet.solana.com"
TESTNET_RPC_URL = "https://api.testnet.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"
HELIUS_DEVNET_URL_TEMPLATE = "https://devnet.helius-rpc.com/?api-key={key}"

# Token list chainId per cluster (solana-labs token-list convention)
CHAIN_IDS = {"mainnet": 101, "testnet": 102, "devnet": 103}
CLUSTER_SLUGS = {"mainnet": "mainnet-beta", "testnet": "testnet", "devnet": "devnet"}


def load_env() -> None:
    """Load .env from project root without overriding the real environment. Safe to call multiple times."""
    load_dotenv(_ENV_PATH, override=False)


def get_solana_network() -> str:
    """Return SOLANA_NETWORK normalized to mainnet | devnet | testnet."""
    load_env()
    raw = (os.getenv("SOLANA_NETWORK") or os.getenv("SOLANA_CLUSTER") or "mainnet").strip().lower()
    if raw in ("mainnet", "mainnet-beta"):
        return "mainnet"
    if raw in ("devnet", "testnet"):
        return raw
    raise ValueError(f"Unsupported SOLANA_NETWORK: {raw!r}")


def get_solana_rpc_url(network: str | None = None) -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > HELIUS_API_KEY (network-specific) > public cluster default.
    """
    load_env()
    url = (os.getenv("SOLANA_RPC_URL") or "").strip()
    if url:
        return url
    network = network or get_solana_network()
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key and network in ("mainnet", "devnet"):
        template = HELIUS_DEVNET_URL_TEMPLATE if network == "devnet" else HELIUS_MAINNET_URL_TEMPLATE
        return template.format(key=key)
    if network == "devnet":
        return DEVNET_RPC_URL
    if network == "testnet":
        return TESTNET_RPC_URL
    return MAINNET_RPC_URL


def mask_rpc_url(rpc: str) -> str:
    """Hide API keys embedded in an RPC URL before logging it."""
    if "api-key=" in rpc:
        return rpc.split("api-key=")[0] + "api-key=***"
    return rpc
