"""
Transaction builder: ordered sweep instructions for one snapshot.

Instruction order is fixed: SPL token transfers (snapshot order), then the
native SOL transfer, then the memo. Each token's source balance is re-read
from its associated token account before the transfer is added; a token whose
account is empty or unreadable is skipped without affecting the rest.
"""

from __future__ import annotations

from typing import Any

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.system_program import TransferParams as SystemTransferParams
from solders.system_program import transfer as system_transfer
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import TransferParams as TokenTransferParams
from spl.token.instructions import get_associated_token_address
from spl.token.instructions import transfer as token_transfer

from wallet_sweep.ledger.models import RecentBlockhash
from wallet_sweep.sweep.models import TokenHolding, TransactionPlan, WalletSnapshot
from wallet_sweep.sweep_logging import get_logger

logger = get_logger(__name__)

MEMO_PROGRAM_ID = Pubkey.from_string("MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr")


def build_memo_instruction(memo: str) -> Instruction:
    """Memo program instruction with no signer accounts."""
    return Instruction(program_id=MEMO_PROGRAM_ID, data=memo.encode("utf-8"), accounts=[])


class TransactionBuilder:
    def __init__(self, ledger: Any, destination: Pubkey, memo: str) -> None:
        self._ledger = ledger
        self._destination = destination
        self._memo = memo

    @property
    def destination(self) -> Pubkey:
        return self._destination

    async def build(
        self,
        snapshot: WalletSnapshot,
        sweep_lamports: int,
        fee_payer: Pubkey,
        recent: RecentBlockhash,
    ) -> TransactionPlan:
        if sweep_lamports <= 0:
            raise ValueError("sweep_lamports must be positive")
        owner = Pubkey.from_string(snapshot.address)
        instructions: list[Instruction] = []

        # one transfer per source ATA; extra accounts of the same mint share it
        seen_sources: set[Pubkey] = set()
        for holding in snapshot.holdings:
            ix = await self._token_transfer(holding, owner, seen_sources)
            if ix is not None:
                instructions.append(ix)
        token_transfers = len(instructions)

        instructions.append(
            system_transfer(
                SystemTransferParams(from_pubkey=owner, to_pubkey=self._destination, lamports=sweep_lamports)
            )
        )
        instructions.append(build_memo_instruction(self._memo))

        logger.info(
            "sweep_plan_built",
            wallet=snapshot.address,
            token_transfers=token_transfers,
            sweep_lamports=sweep_lamports,
            fee_payer=str(fee_payer),
        )
        return TransactionPlan(
            fee_payer=fee_payer,
            owner=owner,
            destination=self._destination,
            instructions=tuple(instructions),
            recent_blockhash=recent.blockhash,
            last_valid_block_height=recent.last_valid_block_height,
            token_transfers=token_transfers,
        )

    async def _token_transfer(
        self, holding: TokenHolding, owner: Pubkey, seen_sources: set[Pubkey]
    ) -> Instruction | None:
        """Full-balance transfer from owner's ATA to destination's ATA, or None to skip."""
        try:
            mint = Pubkey.from_string(holding.mint)
            source = get_associated_token_address(owner, mint)
            if source in seen_sources:
                logger.info("token_transfer_skipped", mint=holding.mint, reason="duplicate_mint")
                return None
            seen_sources.add(source)
            dest = get_associated_token_address(self._destination, mint)
            current = await self._ledger.get_token_account(str(source))
            if current.amount <= 0:
                logger.info("token_transfer_skipped", mint=holding.mint, reason="empty_source")
                return None
            return token_transfer(
                TokenTransferParams(
                    program_id=TOKEN_PROGRAM_ID,
                    source=source,
                    dest=dest,
                    owner=owner,
                    amount=current.amount,
                )
            )
        except Exception as e:
            logger.warning("token_transfer_skipped", mint=holding.mint, symbol=holding.symbol, error=str(e))
            return None
