"""
Main entrypoint: Wallet Sweep FastAPI server.

Settings come from the environment (and .env at the project root); see
.env.example. Mode is chosen once at startup: PRIVATE_KEY set means
backend-signed sweeps, otherwise unsigned transactions are returned.

Equivalent: uvicorn wallet_sweep.api_server.app:app --host 0.0.0.0 --port 3000
"""

from wallet_sweep.sweep_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Validate settings, then run the API server in the main thread."""
    from wallet_sweep.api_server.server import run
    from wallet_sweep.config import get_settings

    cfg = get_settings()
    logger.info("main_server_starting", host=cfg.api_host, port=cfg.port, mode=cfg.mode.value)
    run()


if __name__ == "__main__":
    main()
