"""
Ledger gateway over the Solana JSON-RPC surface (solana-py AsyncClient).

Wraps every call the sweep pipeline needs: native balance, token accounts by
owner (SPL Token program), parsed token/mint account reads, fee floor and
latest blockhash, raw transaction submission and confirmation. Any transport
or RPC failure is raised as LedgerError with the original exception chained.
No retries or extra timeouts are layered on top of the client.
"""

from __future__ import annotations

from typing import Any

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TokenAccountOpts, TxOpts
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from spl.token.constants import TOKEN_PROGRAM_ID

from wallet_sweep.config.env import mask_rpc_url
from wallet_sweep.core.exceptions import LedgerError
from wallet_sweep.ledger.models import RecentBlockhash, TokenAccountState
from wallet_sweep.sweep_logging import get_logger

logger = get_logger(__name__)


def _get_resp_value(resp: Any) -> Any:
    if resp is None:
        return None
    v = getattr(resp, "value", None)
    if v is not None:
        return v
    if hasattr(resp, "result"):
        return getattr(resp.result, "value", None)
    return None


def _parsed_info(account: Any) -> dict[str, Any]:
    """
    Extract data.parsed["info"] from a jsonParsed account.
    Accepts solders ParsedAccount objects or plain dicts.
    """
    if account is None:
        raise LedgerError("account not found")
    data = getattr(account, "data", None)
    if data is None and isinstance(account, dict):
        data = account.get("data")
    parsed = getattr(data, "parsed", None)
    if parsed is None and isinstance(data, dict):
        parsed = data.get("parsed")
    info = parsed.get("info") if isinstance(parsed, dict) else None
    if not isinstance(info, dict):
        raise LedgerError("account data is not jsonParsed")
    return info


def parse_token_account(address: str, account: Any) -> TokenAccountState:
    """Build TokenAccountState from a jsonParsed SPL token account."""
    info = _parsed_info(account)
    try:
        mint = str(info["mint"])
        amount = int(info["tokenAmount"]["amount"])
    except (KeyError, TypeError, ValueError) as e:
        raise LedgerError(f"malformed token account {address}") from e
    return TokenAccountState(address=address, mint=mint, amount=amount)


class LedgerClient:
    """
    Async read/write gateway to one Solana cluster.

    Owns the AsyncClient; call close() (or use as async context manager) on shutdown.
    """

    def __init__(self, rpc_url: str, *, client: AsyncClient | None = None) -> None:
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        self._rpc_url = rpc_url
        self._client = client or AsyncClient(rpc_url, commitment=Confirmed)

    async def __aenter__(self) -> "LedgerClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    async def get_balance(self, owner: Pubkey) -> int:
        """Native balance in lamports."""
        try:
            resp = await self._client.get_balance(owner, commitment=Confirmed)
        except Exception as e:
            raise LedgerError(f"getBalance failed: {e}") from e
        value = _get_resp_value(resp)
        if value is None:
            raise LedgerError("getBalance returned no value")
        return int(value)

    async def get_token_accounts(self, owner: Pubkey) -> list[str]:
        """Addresses of all SPL Token program accounts owned by owner."""
        try:
            resp = await self._client.get_token_accounts_by_owner(
                owner, TokenAccountOpts(program_id=TOKEN_PROGRAM_ID), commitment=Confirmed
            )
        except Exception as e:
            raise LedgerError(f"getTokenAccountsByOwner failed: {e}") from e
        value = _get_resp_value(resp)
        if value is None:
            return []
        return [str(acct.pubkey) for acct in value]

    async def get_token_account(self, address: str) -> TokenAccountState:
        """Parsed amount and mint for one token account."""
        try:
            resp = await self._client.get_account_info_json_parsed(
                Pubkey.from_string(address), commitment=Confirmed
            )
        except Exception as e:
            raise LedgerError(f"getAccountInfo failed for {address}: {e}") from e
        return parse_token_account(address, _get_resp_value(resp))

    async def get_mint_decimals(self, mint: str) -> int:
        try:
            resp = await self._client.get_account_info_json_parsed(
                Pubkey.from_string(mint), commitment=Confirmed
            )
        except Exception as e:
            raise LedgerError(f"getAccountInfo failed for mint {mint}: {e}") from e
        info = _parsed_info(_get_resp_value(resp))
        try:
            return int(info["decimals"])
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerError(f"mint {mint} has no decimals") from e

    async def get_latest_blockhash(self) -> RecentBlockhash:
        try:
            resp = await self._client.get_latest_blockhash(commitment=Confirmed)
        except Exception as e:
            raise LedgerError(f"getLatestBlockhash failed: {e}") from e
        value = _get_resp_value(resp)
        if value is None:
            raise LedgerError("getLatestBlockhash returned no value")
        return RecentBlockhash(
            blockhash=value.blockhash,
            last_valid_block_height=int(value.last_valid_block_height),
        )

    async def get_fee_per_signature(self, payer: Pubkey) -> int:
        """
        Current fee floor per signature.

        Prices a one-signature probe message (zero-lamport self transfer) with
        getFeeForMessage against the latest blockhash.
        """
        recent = await self.get_latest_blockhash()
        probe = Message.new_with_blockhash(
            [transfer(TransferParams(from_pubkey=payer, to_pubkey=payer, lamports=0))],
            payer,
            recent.blockhash,
        )
        try:
            resp = await self._client.get_fee_for_message(probe, commitment=Confirmed)
        except Exception as e:
            raise LedgerError(f"getFeeForMessage failed: {e}") from e
        fee = _get_resp_value(resp)
        if fee is None:
            raise LedgerError("getFeeForMessage returned no fee (blockhash expired?)")
        return int(fee) // max(1, probe.header.num_required_signatures)

    async def send_raw_transaction(self, raw: bytes) -> str:
        """Broadcast a signed transaction; returns its signature (txid)."""
        try:
            resp = await self._client.send_raw_transaction(
                raw, opts=TxOpts(skip_confirmation=True, preflight_commitment=Confirmed)
            )
        except Exception as e:
            raise LedgerError(f"sendTransaction failed: {e}") from e
        value = _get_resp_value(resp)
        if value is None:
            raise LedgerError("sendTransaction returned no signature")
        txid = str(value)
        logger.info("ledger_tx_sent", txid=txid)
        return txid

    async def confirm_transaction(self, txid: str, last_valid_block_height: int | None = None) -> str:
        """Block until the transaction reaches 'confirmed'; return its confirmation status."""
        try:
            resp = await self._client.confirm_transaction(
                Signature.from_string(txid),
                commitment=Confirmed,
                last_valid_block_height=last_valid_block_height,
            )
        except Exception as e:
            raise LedgerError(f"confirmTransaction failed for {txid}: {e}") from e
        statuses = _get_resp_value(resp) or []
        status = statuses[0] if statuses else None
        if status is None:
            raise LedgerError(f"no status for {txid}")
        err = getattr(status, "err", None)
        if err is not None:
            raise LedgerError(f"transaction {txid} failed on-chain: {err}")
        confirmation = getattr(status, "confirmation_status", None)
        result = str(confirmation).split(".")[-1].lower() if confirmation is not None else "confirmed"
        logger.info("ledger_tx_confirmed", txid=txid, confirmation_status=result)
        return result

    def __repr__(self) -> str:
        return f"LedgerClient({mask_rpc_url(self._rpc_url)})"
