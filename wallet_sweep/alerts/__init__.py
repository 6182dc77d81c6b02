"""
Operator alerts: Telegram notification of inspected wallets.
"""

from wallet_sweep.alerts.telegram import TelegramNotifier, format_wallet_alert, short_wallet

__all__ = ["TelegramNotifier", "format_wallet_alert", "short_wallet"]
