"""Wire models for the pendant snapshot, camera frames, alerts and relay results."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ActivityType(str, Enum):
    REST = "REST"
    WALK = "WALK"
    RUN = "RUN"


class Location(WireModel):
    latitude: float = 14.5995
    longitude: float = 120.9842
    accuracy: float = 90.0  # percent; 90 means no GPS fix
    speed: float = 0.0


class Activity(WireModel):
    type: ActivityType = ActivityType.REST
    steps: int = 0
    calories: float = 0


class Accelerometer(WireModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class CameraState(WireModel):
    latest_frame: str
    frame_number: int
    width: int
    height: int
    format: str
    last_update: str


class DeviceSnapshot(WireModel):
    id: str
    name: str
    online: bool = False
    last_seen: str
    battery: int = 75
    location: Location = Field(default_factory=Location)
    activity: Activity = Field(default_factory=Activity)
    accelerometer: Accelerometer = Field(default_factory=Accelerometer)
    panic_pressed: bool = False
    camera: Optional[CameraState] = None


class CameraFrame(WireModel):
    device_id: str
    frame_number: int
    timestamp: str
    width: int = 160
    height: int = 120
    format: str = "grayscale-1bit"
    image_data: str = ""

    @property
    def image_url(self) -> str:
        return f"data:image/jpeg;base64,{self.image_data}"

    def to_wire(self) -> dict[str, Any]:
        data = super().to_wire()
        data["imageUrl"] = self.image_url
        return data


class AlertEvent(WireModel):
    id: str
    device_id: str
    type: str = "panic"
    timestamp: Union[str, int, float]  # devices without a clock send millis since boot
    location: Location
    handled: bool = False


class RelayOutcome(WireModel):
    success: bool
    message: str
    connected_arduinos: int = 0
