"""Device reads for the app: GET /api/devices, /api/devices/{device_id}, /api/devices/{device_id}/telemetry.

There is exactly one pendant, so device_id is accepted but not used for lookup.
"""
from fastapi import APIRouter, Depends

from ..deps import get_relay
from ..state import RelayContext

router = APIRouter()


@router.get("/api/devices")
async def list_devices(relay: RelayContext = Depends(get_relay)):
    return [relay.store.read().to_wire()]


@router.get("/api/devices/{device_id}")
async def get_device(device_id: str, relay: RelayContext = Depends(get_relay)):
    return relay.store.read().to_wire()


@router.get("/api/devices/{device_id}/telemetry")
async def get_device_telemetry(device_id: str, relay: RelayContext = Depends(get_relay)):
    return relay.store.read().to_wire()
