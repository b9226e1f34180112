"""
API routes for matter2mqtt-pair.

Each handler validates the method and body, then runs the blocking
chip-tool and devices.yaml work in the threadpool. Errors are raised as
HTTPException and rendered as {"status": "error", "message": ...} by the
handler installed in server.create_app().
"""

import logging
from typing import List, Optional, Type, TypeVar

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.concurrency import run_in_threadpool

from ..commissioning import ChipTool, classify_pairing_error, classify_unpair_error
from ..config import Config
from ..registry import DeviceEntry, DeviceRegistry, RegistryError, MAX_NODE_ID

logger = logging.getLogger(__name__)

router = APIRouter()

# Handlers accept every method and reject the wrong ones themselves, so a
# bad method is a 405 here instead of falling through to the static files.
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

RESTART_HINT_PAIR = "Restart matter2mqtt to activate."
RESTART_HINT_UNPAIR = "Restart matter2mqtt to apply changes."


# ============ Request/Response Models ============

class PairRequest(BaseModel):
    """Commission a device and register it under a topic."""
    model_config = ConfigDict(extra="ignore")

    code: str = Field(..., strict=True, description="QR payload (MT:...) or manual pairing code")
    name: str = Field(..., strict=True, description="Topic name for the bridge")
    node_id: int = Field(..., strict=True, ge=0, le=MAX_NODE_ID, description="Matter node ID to assign")


class UnpairRequest(BaseModel):
    """Decommission a device and drop it from the registry."""
    model_config = ConfigDict(extra="ignore")

    node_id: int = Field(..., strict=True, ge=0, le=MAX_NODE_ID)


class DeviceItem(BaseModel):
    """A registered device as listed by GET /api/devices."""
    node_id: int
    topic: str
    sensitivity: Optional[str] = None
    debounce_ms: Optional[int] = None


class StatusResponse(BaseModel):
    status: str = "success"
    message: str


class DeviceListResponse(BaseModel):
    status: str = "success"
    devices: List[DeviceItem] = []


# ============ Helpers ============

Model = TypeVar("Model", bound=BaseModel)


def _require_method(request: Request, *allowed: str) -> None:
    if request.method not in allowed:
        raise HTTPException(
            status_code=405,
            detail="Method not allowed",
            headers={"Allow": ", ".join(allowed)},
        )


async def _parse_body(request: Request, model: Type[Model]) -> Model:
    try:
        payload = await request.json()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid JSON body: {e}")

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        )
        raise HTTPException(status_code=400, detail=f"Invalid request: {errors}")


def _state(request: Request):
    state = request.app.state
    return state.config, state.chip_tool, state.registry


# ============ Workflows (run in the threadpool) ============

def pair_device(config: Config, chip_tool: ChipTool, registry: DeviceRegistry, req: PairRequest) -> str:
    """Commission with chip-tool, then record the node in devices.yaml."""
    result = chip_tool.pair(req.node_id, req.code)
    if not result.succeeded:
        raise HTTPException(status_code=500, detail=classify_pairing_error(result.output))

    try:
        with registry.lock:
            devices = registry.load()
            previous = devices.get(req.node_id)
            if previous is not None:
                logger.info(f"Replacing entry for device {req.node_id} (was '{previous.topic}')")
            # Re-pairing replaces the whole entry, including sensitivity/debounce_ms
            devices.upsert(req.node_id, DeviceEntry(topic=req.name))
            registry.save(devices)
    except RegistryError as e:
        logger.error(f"Device {req.node_id} was commissioned but not registered: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Paired device {req.node_id} as '{req.name}'")
    return (
        f"Device {req.node_id} commissioned and added to {config.devices_path}. "
        f"{RESTART_HINT_PAIR}"
    )


def unpair_device(config: Config, chip_tool: ChipTool, registry: DeviceRegistry, req: UnpairRequest) -> str:
    """Decommission with chip-tool, then drop the node from devices.yaml."""
    result = chip_tool.unpair(req.node_id)
    if not result.succeeded:
        raise HTTPException(status_code=500, detail=classify_unpair_error(result.output))

    try:
        with registry.lock:
            devices = registry.load()
            if not devices.remove(req.node_id):
                raise HTTPException(
                    status_code=404,
                    detail=f"Device {req.node_id} not found in {registry.file_name}",
                )
            registry.save(devices)
    except RegistryError as e:
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Unpaired device {req.node_id}")
    return (
        f"Device {req.node_id} unpaired and removed from {config.devices_path}. "
        f"{RESTART_HINT_UNPAIR}"
    )


def list_registered_devices(registry: DeviceRegistry) -> List[DeviceItem]:
    try:
        with registry.lock:
            devices = registry.load()
    except RegistryError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return [
        DeviceItem(node_id=node_id, **entry.to_dict())
        for node_id, entry in devices.items()
    ]


# ============ Routes ============

@router.api_route("/pair", methods=ALL_METHODS, response_model=StatusResponse)
async def pair(request: Request):
    """
    Commission a device and add it to devices.yaml.

    Body: {"code": "MT:...", "name": "Living Room Sensor", "node_id": 42}
    """
    _require_method(request, "POST")
    req = await _parse_body(request, PairRequest)
    config, chip_tool, registry = _state(request)

    message = await run_in_threadpool(pair_device, config, chip_tool, registry, req)
    return StatusResponse(message=message)


@router.api_route("/unpair", methods=ALL_METHODS, response_model=StatusResponse)
async def unpair(request: Request):
    """
    Decommission a device and remove it from devices.yaml.

    Body: {"node_id": 42}
    """
    _require_method(request, "POST", "DELETE")
    req = await _parse_body(request, UnpairRequest)
    config, chip_tool, registry = _state(request)

    message = await run_in_threadpool(unpair_device, config, chip_tool, registry, req)
    return StatusResponse(message=message)


@router.api_route(
    "/devices",
    methods=ALL_METHODS,
    response_model=DeviceListResponse,
    response_model_exclude_none=True,
)
async def devices(request: Request):
    """List every device in devices.yaml, sorted by node ID."""
    _require_method(request, "GET")
    _, _, registry = _state(request)

    items = await run_in_threadpool(list_registered_devices, registry)
    return DeviceListResponse(devices=items)
