"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn wallet_sweep.api_server.app:app --host 0.0.0.0 --port 3000
"""

from wallet_sweep.api_server.server import create_app

app = create_app()

__all__ = ["app"]
