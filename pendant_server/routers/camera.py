"""Camera pipeline: POST /api/image, GET /api/camera/latest, GET /api/camera/frames."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_relay, json_object
from ..schemas import CameraFrame, utc_now_iso
from ..services.connections import broadcast
from ..state import RelayContext

logger = logging.getLogger(__name__)
router = APIRouter()


def _int_or(value, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def build_frame(body: dict, relay: RelayContext) -> CameraFrame:
    image_data = body.get("imageData")
    if not isinstance(image_data, str):
        image_data = ""
    fmt = body.get("format")
    device_id = body.get("deviceId")
    return CameraFrame(
        device_id=device_id if isinstance(device_id, str) and device_id else relay.settings.device_id,
        frame_number=_int_or(body.get("frameNumber"), len(relay.frames)),
        timestamp=utc_now_iso(),
        width=_int_or(body.get("width"), 160) or 160,
        height=_int_or(body.get("height"), 120) or 120,
        format=fmt if isinstance(fmt, str) and fmt else "grayscale-1bit",
        image_data=image_data,
    )


@router.post("/api/image")
async def api_image(body: dict = Depends(json_object), relay: RelayContext = Depends(get_relay)):
    """Buffer a camera frame from the pendant and push it to viewers."""
    frame = build_frame(body, relay)
    if not frame.image_data:
        logger.warning("Frame %d arrived without imageData", frame.frame_number)
    logger.info("Frame %d received (%s, %dx%d)", frame.frame_number, frame.format, frame.width, frame.height)
    relay.frames.push(frame)
    relay.store.apply_camera_update(frame)
    await broadcast(relay.registry.viewers, relay.settings.camera_topic, frame.to_wire())
    return {
        "success": True,
        "message": "Frame received",
        "frameNumber": frame.frame_number,
        "bufferedFrames": len(relay.frames),
    }


@router.get("/api/camera/latest")
async def camera_latest(relay: RelayContext = Depends(get_relay)):
    frame = relay.frames.latest()
    if frame is None:
        raise HTTPException(status_code=404, detail="No frames available")
    return frame.to_wire()


@router.get("/api/camera/frames")
async def camera_frames(relay: RelayContext = Depends(get_relay)):
    """All buffered frames, oldest first, for flip-book playback."""
    frames = relay.frames.all()
    return {
        "frames": [f.to_wire() for f in frames],
        "totalFrames": len(frames),
        "fps": relay.frames.fps,
    }
