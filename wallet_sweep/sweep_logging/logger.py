"""
Structured logging for the sweep service.

JSON lines (LOG_FORMAT=json, default) carry timestamp, level, logger,
event_type and any request-bound wallet; LOG_FORMAT=console switches to the
human-readable renderer for local runs. Modules call get_logger(__name__) and
log snake_case events with keyword fields.

Imports nothing from wallet_sweep so every package can depend on it.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _event_to_event_type(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """JSON key for the event name is event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def configure_structlog(log_format: str | None = None, level: int | None = None) -> None:
    """(Re)configure structlog for the given format and minimum level."""
    fmt = (log_format or LOG_FORMAT).strip().lower()
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors += [_event_to_event_type, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level if level is not None else LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("wallet_snapshot_built", wallet=addr, holdings=3)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_wallet(wallet: str) -> None:
    """Bind wallet to every log line emitted by the current request context."""
    structlog.contextvars.bind_contextvars(wallet=wallet)


def clear_wallet() -> None:
    structlog.contextvars.unbind_contextvars("wallet")
