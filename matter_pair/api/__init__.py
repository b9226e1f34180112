"""
API server for matter2mqtt-pair.

Provides:
- POST /api/pair, POST|DELETE /api/unpair, GET /api/devices
- The pairing web page
"""

from .server import create_app, run_server
from .routes import router

__all__ = [
    "create_app",
    "run_server",
    "router",
]
