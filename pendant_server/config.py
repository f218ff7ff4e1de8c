"""Settings read from the environment (and an optional .env at the project root)."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"

AUDIO_MODES = ("websocket", "http")


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    device_id: str = "pendant-1"
    device_name: str = "Liam's Pendant"
    frame_buffer_size: int = 10
    audio_relay_mode: str = "websocket"
    device_audio_url: str = ""
    audio_forward_timeout: float = 10.0
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def telemetry_topic(self) -> str:
        return f"devices/{self.device_id}/telemetry"

    @property
    def alert_topic(self) -> str:
        return f"devices/{self.device_id}/alert"

    @property
    def camera_topic(self) -> str:
        return f"devices/{self.device_id}/camera"


def load_settings() -> Settings:
    """Build Settings from os.environ, loading .env first if present."""
    load_dotenv(ENV_FILE)

    mode = (os.environ.get("AUDIO_RELAY_MODE") or "websocket").strip().lower()
    if mode not in AUDIO_MODES:
        logger.warning("Unknown AUDIO_RELAY_MODE=%r, falling back to websocket", mode)
        mode = "websocket"

    buffer_size = _int_env("FRAME_BUFFER_SIZE", 10)
    if buffer_size < 1:
        logger.warning("FRAME_BUFFER_SIZE must be positive, using 10")
        buffer_size = 10

    origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    return Settings(
        host=os.environ.get("HOST", "0.0.0.0"),
        port=_int_env("PORT", 3000),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        device_id=os.environ.get("DEVICE_ID", "pendant-1"),
        device_name=os.environ.get("DEVICE_NAME", "Liam's Pendant"),
        frame_buffer_size=buffer_size,
        audio_relay_mode=mode,
        device_audio_url=os.environ.get("DEVICE_AUDIO_URL", "").strip(),
        audio_forward_timeout=_float_env("AUDIO_FORWARD_TIMEOUT", 10.0),
        cors_origins=origins or ["*"],
    )
