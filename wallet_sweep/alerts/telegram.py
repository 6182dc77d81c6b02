"""
Telegram notification dispatcher.

Formats a wallet snapshot as a Markdown alert and pushes it through the Bot
API sendMessage endpoint with httpx. Delivery is best-effort: schedule() runs
the push as a background task, and every failure is logged as a
NotificationError without reaching the request.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from wallet_sweep.core.exceptions import NotificationError
from wallet_sweep.sweep.models import WalletSnapshot
from wallet_sweep.sweep_logging import get_logger

logger = get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"
SOLSCAN_URL = "https://solscan.io"


def short_wallet(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"


def _explorer_link(kind: str, address: str, cluster: str | None) -> str:
    url = f"{SOLSCAN_URL}/{kind}/{address}"
    if cluster and cluster != "mainnet-beta":
        url += f"?cluster={cluster}"
    return url


def format_wallet_alert(snapshot: WalletSnapshot, cluster: str | None = None) -> str:
    """Markdown alert: linked short address, SOL balance, one line per token."""
    link = _explorer_link("account", snapshot.address, cluster)
    message = (
        "🚨 *Solana Wallet Detected!*\n\n"
        f"👛 *Address:* [{short_wallet(snapshot.address)}]({link})\n"
        f"💰 *SOL Balance:* `{snapshot.sol_balance:.4f} SOL`\n"
    )
    if snapshot.holdings:
        message += "\n🪙 *SPL Tokens:*"
        for token in snapshot.holdings:
            token_link = _explorer_link("token", token.mint, cluster)
            message += (
                f"\n🔸[Symbol]({token_link}) *{token.symbol}* \n"
                f"   • Balance: `{token.ui_amount:.2f}`\n"
            )
    return message


class TelegramNotifier:
    """Push wallet alerts to one Telegram chat; disabled when token or chat id is missing."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        cluster: str | None = None,
        timeout_sec: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._bot_token = bot_token.strip()
        self._chat_id = chat_id.strip()
        self._cluster = cluster
        self._timeout = timeout_sec
        self._client = client
        self._pending: set[asyncio.Task[Any]] = set()

    @property
    def enabled(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    async def send(self, text: str) -> None:
        """Send one message; raises NotificationError on any failure."""
        body = {
            "chat_id": self._chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
        }
        url = TELEGRAM_API_URL.format(token=self._bot_token)
        try:
            if self._client is not None:
                resp = await self._client.post(url, json=body)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
                    resp = await client.post(url, json=body)
            resp.raise_for_status()
            data = resp.json()
        except Exception as e:
            raise NotificationError(f"telegram send failed: {e}") from e
        if not data.get("ok", False):
            raise NotificationError(f"telegram rejected message: {data.get('description', data)}")

    async def notify(self, snapshot: WalletSnapshot) -> bool:
        """Format and send the alert for snapshot. Returns True when delivered."""
        if not self.enabled:
            logger.debug("telegram_disabled", wallet=snapshot.address)
            return False
        try:
            await self.send(format_wallet_alert(snapshot, self._cluster))
        except Exception as e:
            logger.warning("telegram_notify_failed", wallet=snapshot.address, error=str(e))
            return False
        logger.info("telegram_notified", wallet=snapshot.address, holdings=len(snapshot.holdings))
        return True

    def schedule(self, snapshot: WalletSnapshot) -> asyncio.Task[bool]:
        """Fire-and-forget notify(); the task is tracked until done so drain() can await it."""
        task = asyncio.get_running_loop().create_task(self.notify(snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Await all in-flight notifications (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
