"""
Pytest fixtures for Wallet Sweep tests. Ledger and notifier doubles live in tests/fakes.py.
"""

from __future__ import annotations

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from tests.fakes import DESTINATION, registry_with
from wallet_sweep.config import Settings
from wallet_sweep.registry import TokenRegistry


@pytest.fixture
def wallet() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def empty_registry() -> TokenRegistry:
    return registry_with()


@pytest.fixture
def unsigned_settings() -> Settings:
    return Settings(destination=DESTINATION)


@pytest.fixture
def signer() -> Keypair:
    return Keypair()


@pytest.fixture
def signed_settings(signer: Keypair) -> Settings:
    return Settings(destination=DESTINATION, signer=signer)
