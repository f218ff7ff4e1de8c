"""Device reports: POST /api/telemetry and POST /api/panic."""
import logging
import math
import time

from fastapi import APIRouter, Depends

from ..deps import get_relay, json_object
from ..services.connections import broadcast
from ..state import RelayContext

logger = logging.getLogger(__name__)
router = APIRouter()

# Placeholders the pendant hardware does not measure yet.
DEFAULT_ALTITUDE = 10.0
DEFAULT_SIGNAL_DBM = -70
FIRMWARE_VERSION = "1.0.0"


def telemetry_for_app(relay: RelayContext, device_id: str | None = None) -> dict:
    """Flatten the snapshot into the shape the mobile app renders."""
    snap = relay.store.read()
    return {
        "deviceId": device_id or snap.id,
        "timestamp": snap.last_seen,
        "lat": snap.location.latitude,
        "lon": snap.location.longitude,
        "accuracyMeters": snap.location.accuracy,
        "speed": snap.location.speed,
        "alt": DEFAULT_ALTITUDE,
        "batteryPercent": snap.battery,
        "signalDbm": DEFAULT_SIGNAL_DBM,
        "motionState": snap.activity.type.value.lower(),
        "firmwareVersion": FIRMWARE_VERSION,
    }


@router.post("/api/telemetry")
async def api_telemetry(body: dict = Depends(json_object), relay: RelayContext = Depends(get_relay)):
    """Merge a (partial) telemetry report into the snapshot and push it to viewers."""
    logger.info("Telemetry from device: %s", body)
    relay.store.apply_telemetry(body)
    device_id = body.get("deviceId") if isinstance(body.get("deviceId"), str) else None
    await broadcast(relay.registry.viewers, relay.settings.telemetry_topic, telemetry_for_app(relay, device_id))
    return {"success": True, "message": "Telemetry received"}


@router.post("/api/panic")
async def api_panic(body: dict = Depends(json_object), relay: RelayContext = Depends(get_relay)):
    """Flag the panic button and alert every viewer before responding."""
    started = time.monotonic()
    logger.warning("PANIC BUTTON PRESSED: %s", body)
    timestamp = body.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, (str, int, float)):
        timestamp = None
    elif isinstance(timestamp, float) and not math.isfinite(timestamp):
        timestamp = None
    alert = relay.store.apply_panic(timestamp)
    sent = await broadcast(relay.registry.viewers, relay.settings.alert_topic, alert.to_wire())
    processing_ms = int((time.monotonic() - started) * 1000)
    logger.info("Alert %s sent to %d viewer(s) in %dms", alert.id, sent, processing_ms)
    return {"success": True, "message": "Panic alert sent", "processingTime": processing_ms}
