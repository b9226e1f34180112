"""
FastAPI server for matter2mqtt-pair.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from .. import __version__
from ..commissioning import ChipTool
from ..config import Config, get_config, set_config
from ..registry import DeviceRegistry

logger = logging.getLogger(__name__)

WEB_DIR = Path(__file__).parent.parent / "web"


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as {"status": "error", "message": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    config: Optional[Config] = None,
    chip_tool: Optional[ChipTool] = None,
    registry: Optional[DeviceRegistry] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Resolved configuration (defaults to the global config)
        chip_tool: Commissioning invoker (defaults to one built from config)
        registry: devices.yaml store (defaults to one built from config)
    """
    from .routes import router

    if config:
        set_config(config)
    else:
        config = get_config()

    app = FastAPI(
        title="matter2mqtt-pair",
        description="Commission Matter devices and register them for matter2mqtt",
        version=__version__,
    )

    app.state.config = config
    app.state.chip_tool = chip_tool or ChipTool(config.chip_tool_path, config.storage_path)
    app.state.registry = registry or DeviceRegistry(config.devices_path)

    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # Pairing page; mounted last so /api and /health take precedence
    app.mount("/", StaticFiles(directory=WEB_DIR, html=True), name="web")

    return app


def run_server(config: Config, log_level: str = "info") -> None:
    """Run the server with uvicorn, over HTTPS when TLS is enabled."""
    app = create_app(config)

    ssl_options = {}
    if config.tls_enabled:
        ssl_options = {
            "ssl_certfile": config.cert_file,
            "ssl_keyfile": config.key_file,
        }

    logger.info(f"Listening on {config.scheme}://{config.host}:{config.port}")
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=log_level,
        **ssl_options,
    )
