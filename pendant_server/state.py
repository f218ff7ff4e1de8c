"""Shared relay state: device snapshot, camera frame ring buffer, and the per-app context that owns them."""
import logging
import math
import uuid
from collections import deque
from typing import Any, Optional, Union

from .config import Settings
from .schemas import (
    ActivityType,
    AlertEvent,
    CameraFrame,
    CameraState,
    DeviceSnapshot,
    utc_now_iso,
)
from .services.audio_relay import AudioRelay
from .services.connections import ConnectionRegistry

logger = logging.getLogger(__name__)

NOMINAL_FPS = 2


def _number(value: Any, current: float, name: str) -> float:
    """Return value as a float, or current when value is absent or not numeric. 0 and False count as present."""
    if value is None:
        return current
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric %s=%r", name, value)
        return current
    if not math.isfinite(number):
        logger.warning("Ignoring non-finite %s=%r", name, value)
        return current
    return number


def _sub(update: dict, key: str) -> Optional[dict]:
    part = update.get(key)
    if part is None:
        return None
    if not isinstance(part, dict):
        logger.warning("Ignoring malformed %s=%r", key, part)
        return None
    return part


class StateStore:
    """Holds the single device snapshot and applies partial updates to it in place."""

    def __init__(self, device_id: str, device_name: str) -> None:
        self._snapshot = DeviceSnapshot(id=device_id, name=device_name, last_seen=utc_now_iso())

    def apply_telemetry(self, update: dict) -> None:
        snap = self._snapshot
        snap.online = True
        snap.last_seen = utc_now_iso()

        location = _sub(update, "location")
        if location is not None:
            loc = snap.location
            loc.latitude = _number(location.get("lat"), loc.latitude, "lat")
            loc.longitude = _number(location.get("lng"), loc.longitude, "lng")
            loc.accuracy = _number(location.get("accuracy"), loc.accuracy, "accuracy")
            loc.speed = _number(location.get("speed"), loc.speed, "speed")

        activity = _sub(update, "activity")
        if activity is not None:
            act = snap.activity
            raw_type = activity.get("type")
            if raw_type:
                try:
                    act.type = ActivityType(str(raw_type).upper())
                except ValueError:
                    logger.warning("Ignoring unknown activity type %r", raw_type)
            act.steps = max(0, int(_number(activity.get("steps"), act.steps, "steps")))
            act.calories = max(0.0, _number(activity.get("calories"), act.calories, "calories"))

        accel = _sub(update, "accelerometer")
        if accel is not None:
            acc = snap.accelerometer
            acc.x = _number(accel.get("x"), acc.x, "x")
            acc.y = _number(accel.get("y"), acc.y, "y")
            acc.z = _number(accel.get("z"), acc.z, "z")

        if update.get("battery") is not None:
            battery = _number(update["battery"], snap.battery, "battery")
            snap.battery = min(100, max(0, int(round(battery))))

    def apply_panic(self, timestamp: Optional[Union[str, int, float]] = None) -> AlertEvent:
        self._snapshot.panic_pressed = True
        return AlertEvent(
            id=f"alert-{uuid.uuid4().hex}",
            device_id=self._snapshot.id,
            timestamp=timestamp or utc_now_iso(),
            location=self._snapshot.location.model_copy(),
        )

    def apply_camera_update(self, frame: CameraFrame) -> None:
        self._snapshot.camera = CameraState(
            latest_frame=frame.image_data,
            frame_number=frame.frame_number,
            width=frame.width,
            height=frame.height,
            format=frame.format,
            last_update=frame.timestamp,
        )

    def read(self) -> DeviceSnapshot:
        return self._snapshot.model_copy(deep=True)


class FrameBuffer:
    """Fixed-capacity FIFO of recent camera frames; the oldest is evicted on overflow."""

    def __init__(self, capacity: int = 10) -> None:
        self._frames: deque[CameraFrame] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._frames.maxlen

    def __len__(self) -> int:
        return len(self._frames)

    def push(self, frame: CameraFrame) -> None:
        self._frames.append(frame)

    def latest(self) -> Optional[CameraFrame]:
        return self._frames[-1] if self._frames else None

    def all(self) -> list[CameraFrame]:
        return list(self._frames)

    @property
    def fps(self) -> int:
        # Crude: any two buffered frames report the nominal camera rate.
        return NOMINAL_FPS if len(self._frames) >= 2 else 0


class RelayContext:
    """Everything a request handler may touch. One instance per app."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.store = StateStore(settings.device_id, settings.device_name)
        self.frames = FrameBuffer(settings.frame_buffer_size)
        self.registry = ConnectionRegistry()
        self.audio = AudioRelay(settings, self.registry)
