"""Audio relay: POST /api/audio/send (viewer recording -> pendant speaker)."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_relay, json_object
from ..services.audio_relay import MissingAudioError
from ..state import RelayContext

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/audio/send")
async def api_audio_send(body: dict = Depends(json_object), relay: RelayContext = Depends(get_relay)):
    """Forward base64 audio to the pendant. Delivery failures come back as success=false, not as errors."""
    try:
        outcome = await relay.audio.relay(
            body.get("audio"),
            device_id=body.get("deviceId"),
            timestamp=body.get("timestamp"),
        )
    except MissingAudioError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return outcome.to_wire()
